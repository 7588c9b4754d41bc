import unittest
from unittest import mock

from fastapi.testclient import TestClient
import numpy as np

from backend.app import main
from backend.app.schemas import ClusterLabel

VECTORS = {
    "login": [1.0, 0.0, 0.0],
    "export": [0.0, 1.0, 0.0],
    "dark": [0.0, 0.0, 1.0],
}


def _embed(texts):
    return [next(vector for key, vector in VECTORS.items() if key in text.lower()) for text in texts]


def _label(examples, category):
    return ClusterLabel(title=f"About {examples[0]}", description="desc", category=category, is_high_impact=False)


def _payload(items):
    return {"items": items}


def _fixed_seeds():
    return mock.Mock(choice=mock.Mock(return_value=np.array([0, 2, 4])))


ITEMS = [
    {"id": "a", "text": "Login fails on Safari", "category": "bug", "customerTier": "enterprise"},
    {"id": "b", "text": "Login loops forever", "category": "bug", "customerTier": "enterprise"},
    {"id": "c", "text": "Export to PDF", "category": "feature", "customerTier": "pro"},
    {"id": "d", "text": "Export scheduling", "category": "feature"},
    {"id": "e", "text": "Dark mode", "category": "feature"},
    {"id": "f", "text": "Dark theme please", "category": "feature", "source": "widget"},
]


class ApiTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(main.app)
        main.LAST_RUN["analysis"] = None

    def test_health(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_latest_is_pending_before_first_run(self):
        self.assertEqual(self.client.get("/analysis/latest").json(), {"status": "pending"})

    def test_analyze_returns_camel_case_snapshot(self):
        with mock.patch.object(main, "embed_texts", side_effect=_embed), mock.patch.object(
            main, "label_cluster", side_effect=_label
        ), mock.patch.object(main, "_cluster_rng", side_effect=_fixed_seeds):
            response = self.client.post("/analyze", json=_payload(ITEMS))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["feedbackCount"], 6)
        self.assertEqual(body["summary"], {"bugs": 2, "features": 4, "other": 0})
        seen = [fid for cluster in body["clusters"] for fid in cluster["feedbackIds"]] + body["unclustered"]
        self.assertCountEqual(seen, ["a", "b", "c", "d", "e", "f"])
        self.assertEqual(body["clusters"][0]["feedbackIds"], ["a", "b"])
        self.assertEqual(body["clusters"][0]["impactScore"], 100)
        self.assertEqual(body["clusters"][0]["impactTier"], "high")
        self.assertEqual(body["clusters"][0]["enterpriseCount"], 2)

        latest = self.client.get("/analysis/latest").json()
        self.assertEqual(latest["clusters"], body["clusters"])

    def test_empty_batch_returns_empty_result(self):
        embed = mock.Mock()
        with mock.patch.object(main, "embed_texts", embed):
            response = self.client.post("/analyze", json=_payload([]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["clusters"], [])
        self.assertEqual(response.json()["unclustered"], [])
        embed.assert_not_called()

    def test_embedding_failure_returns_server_error(self):
        with mock.patch.object(main, "embed_texts", side_effect=RuntimeError("provider down")):
            with self.assertLogs("backend.app.main", level="ERROR"):
                response = self.client.post("/analyze", json=_payload(ITEMS))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "Analysis failed")
        self.assertEqual(self.client.get("/analysis/latest").json(), {"status": "pending"})

    def test_labeling_failure_still_returns_labels(self):
        with mock.patch.object(main, "embed_texts", side_effect=_embed), mock.patch.object(
            main, "label_cluster", side_effect=RuntimeError("labeling down")
        ), mock.patch.object(main, "_cluster_rng", side_effect=_fixed_seeds):
            response = self.client.post("/analyze", json=_payload(ITEMS))

        self.assertEqual(response.status_code, 200)
        for cluster in response.json()["clusters"]:
            self.assertTrue(cluster["title"])
            self.assertTrue(cluster["description"])

    def test_duplicate_ids_are_rejected(self):
        items = [dict(ITEMS[0]), dict(ITEMS[1], id="a")]

        response = self.client.post("/analyze", json=_payload(items))

        self.assertEqual(response.status_code, 422)

    def test_blank_text_is_rejected(self):
        response = self.client.post("/analyze", json=_payload([{"id": "x", "text": ""}]))

        self.assertEqual(response.status_code, 422)

    def test_whitespace_only_text_is_rejected(self):
        response = self.client.post("/analyze", json=_payload([{"id": "x", "text": " \t\n "}]))

        self.assertEqual(response.status_code, 422)


class ServeTests(unittest.TestCase):
    def test_serve_runs_the_app_with_configured_address(self):
        with mock.patch("uvicorn.run") as run, \
                mock.patch.object(main, "API_HOST", "0.0.0.0"), \
                mock.patch.object(main, "API_PORT", 9100):
            main.serve()

        run.assert_called_once_with(main.app, host="0.0.0.0", port=9100, log_level=main.LOG_LEVEL.lower())


if __name__ == "__main__":
    unittest.main()
