import json
import unittest
from unittest.mock import patch

from agency.db import MODELS
from agency.tests.support import ApiHarness, image_bytes


def image_part(field="image", color="red"):
    return {field: ("main.png", image_bytes(color), "image/png")}


class ModelRosterTests(unittest.TestCase):
    def setUp(self):
        self.h = ApiHarness()
        self.client = self.h.client
        self.headers = self.h.admin_headers()

    def create(self, files=None, **fields):
        data = {"name": "Amara", "category": "fashion"}
        data.update(fields)
        return self.client.post(
            "/api/models",
            data=data,
            files=image_part() if files is None else files,
            headers=self.headers,
        )

    def test_create_requires_main_image(self):
        response = self.create(files={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Main image is required")
        self.assertEqual(self.h.store.find(MODELS), [])

    def test_create_requires_valid_category(self):
        response = self.create(category="sports")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Valid category is required")
        self.assertEqual(self.h.images.uploads, [])

    def test_measurements_must_be_in_cm(self):
        response = self.create(bust="86")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "bust")

        response = self.create(bust="86 cm", waist="61cm")
        self.assertEqual(response.status_code, 201)

    def test_create_shapes_response(self):
        response = self.create(
            placements=json.dumps([{"city": "Paris", "agency": "Elite"}]),
            socialLinks=json.dumps({"instagram": "https://instagram.com/amara"}),
        )
        self.assertEqual(response.status_code, 201)
        model = response.json()
        self.assertTrue(model["imageUrl"].startswith(self.h.images.base_url))
        self.assertNotIn("imageHandle", model)
        self.assertIsNone(model["bust"])
        self.assertEqual(
            model["socialLinks"],
            {"instagram": "https://instagram.com/amara", "tiktok": None},
        )
        self.assertEqual(model["placements"], [{"city": "Paris", "agency": "Elite"}])
        self.assertEqual(model["portfolioImages"], [])
        self.assertEqual(self.h.images.uploads[0]["folder"], "models")

    def test_create_aborts_when_upload_fails(self):
        self.h.images.fail_uploads = True
        response = self.create()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["message"], "Server error")
        self.assertEqual(self.h.store.find(MODELS), [])

    def test_non_image_upload_is_rejected(self):
        response = self.create(files={"image": ("cv.pdf", b"%PDF-1.4", "application/pdf")})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "File must be an image")

    def test_list_filters_and_paginates_newest_first(self):
        for i, (name, category) in enumerate(
            [("Amara", "fashion"), ("Bisi", "runway"), ("Amaka", "fashion")]
        ):
            self.h.store.insert(MODELS, {"name": name, "category": category}, created_at=1000.0 + i)

        response = self.client.get("/api/models", params={"limit": 2})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["total"], 3)
        self.assertEqual([m["name"] for m in payload["models"]], ["Amaka", "Bisi"])

        response = self.client.get("/api/models", params={"page": 2, "limit": 2})
        self.assertEqual([m["name"] for m in response.json()["models"]], ["Amara"])

        response = self.client.get("/api/models", params={"category": "fashion", "name": "AMA"})
        self.assertEqual(response.json()["total"], 2)

        response = self.client.get("/api/models", params={"category": "all", "name": "bis"})
        self.assertEqual([m["name"] for m in response.json()["models"]], ["Bisi"])

    def test_invalid_pagination(self):
        for params in ({"page": "abc"}, {"page": 0}, {"limit": 101}):
            with self.subTest(params=params):
                response = self.client.get("/api/models", params=params)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["message"], "Invalid page or limit parameters")

    def test_get_unknown_or_malformed_id(self):
        for model_id in ("0" * 32, "nope"):
            response = self.client.get(f"/api/models/{model_id}")
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json()["message"], "Model not found")

    def test_update_merges_and_replaces_image(self):
        created = self.create(description="Editorial regular").json()
        old_handle = self.h.images.uploads[0]["deletion_handle"]

        response = self.client.put(
            f"/api/models/{created['id']}",
            data={"height": "178 cm", "socialLinks": json.dumps({"tiktok": "https://tiktok.com/@amara"})},
            files=image_part(color="blue"),
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        model = response.json()
        self.assertEqual(model["description"], "Editorial regular")
        self.assertEqual(model["height"], "178 cm")
        self.assertEqual(model["socialLinks"]["tiktok"], "https://tiktok.com/@amara")
        self.assertNotEqual(model["imageUrl"], created["imageUrl"])
        self.assertEqual(self.h.images.destroyed, [old_handle])

    def test_category_is_case_insensitive_on_update(self):
        created = self.create(category="Fashion").json()
        self.assertEqual(created["category"], "fashion")

        response = self.client.put(
            f"/api/models/{created['id']}", data={"category": "Runway"}, headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["category"], "runway")

        response = self.client.put(
            f"/api/models/{created['id']}", data={"category": "Sports"}, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid category")

    def test_created_model_reads_back_unchanged(self):
        created = self.create(
            description="Editorial regular",
            height="178 cm",
            bust="86 cm",
            placements=json.dumps([{"city": "Paris", "agency": "Elite"}, {"city": "Milan"}]),
            socialLinks=json.dumps({"instagram": "https://instagram.com/amara"}),
        ).json()
        with_portfolio = self.client.post(
            f"/api/models/{created['id']}/portfolio",
            files=image_part(color="green"),
            headers=self.headers,
        ).json()

        fetched = self.client.get(f"/api/models/{created['id']}").json()
        self.assertEqual(fetched, with_portfolio)
        self.assertEqual(fetched["name"], "Amara")
        self.assertEqual(fetched["category"], "fashion")
        self.assertEqual(fetched["description"], "Editorial regular")
        self.assertEqual(fetched["height"], "178 cm")
        self.assertEqual(fetched["bust"], "86 cm")
        for key in ("waist", "hips", "hair", "eyes", "shoes", "modelSize", "location"):
            self.assertIn(key, fetched)
            self.assertIsNone(fetched[key])
        self.assertEqual(
            fetched["placements"],
            [{"city": "Paris", "agency": "Elite"}, {"city": "Milan", "agency": None}],
        )
        self.assertEqual(
            fetched["socialLinks"],
            {"instagram": "https://instagram.com/amara", "tiktok": None},
        )
        self.assertEqual(fetched["imageUrl"], created["imageUrl"])
        self.assertEqual(
            fetched["portfolioImages"], [{"url": self.h.images.uploads[-1]["url"]}]
        )

    def test_name_only_update_leaves_other_fields(self):
        created = self.create(
            description="Editorial regular",
            waist="61 cm",
            placements=json.dumps([{"city": "Paris", "agency": "Elite"}]),
            socialLinks=json.dumps({"tiktok": "https://tiktok.com/@amara"}),
        ).json()
        before = self.client.get(f"/api/models/{created['id']}").json()

        response = self.client.put(
            f"/api/models/{created['id']}", data={"name": "Amara B"}, headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        after = self.client.get(f"/api/models/{created['id']}").json()

        self.assertEqual(after["name"], "Amara B")
        self.assertIsNotNone(after["updatedAt"])
        for key in ("name", "updatedAt"):
            before.pop(key)
            after.pop(key)
        self.assertEqual(after, before)
        self.assertEqual(self.h.images.destroyed, [])

    def test_store_failure_after_replacement_upload_releases_new_image(self):
        created = self.create().json()
        old_handle = self.h.images.uploads[0]["deletion_handle"]

        with patch.object(self.h.store, "update", side_effect=RuntimeError("db down")):
            response = self.client.put(
                f"/api/models/{created['id']}",
                data={"name": "Renamed"},
                files=image_part(color="blue"),
                headers=self.headers,
            )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["message"], "Server error")
        new_handle = self.h.images.uploads[1]["deletion_handle"]
        self.assertEqual(self.h.images.destroyed, [old_handle, new_handle])

    def test_failed_replacement_leaves_record_unchanged(self):
        created = self.create().json()
        self.h.images.fail_uploads = True

        response = self.client.put(
            f"/api/models/{created['id']}",
            data={"name": "Renamed"},
            files=image_part(color="blue"),
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(self.h.images.destroyed, [])
        self.assertEqual(self.h.store.get(MODELS, created["id"])["name"], "Amara")

    def test_portfolio_add_and_remove(self):
        created = self.create().json()
        url = f"/api/models/{created['id']}/portfolio"

        response = self.client.post(url, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Portfolio image is required")

        response = self.client.post(url, files=image_part(color="green"), headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["portfolioImages"]), 1)
        self.assertNotIn("deletionHandle", response.json()["portfolioImages"][0])
        portfolio_handle = self.h.images.uploads[-1]["deletion_handle"]
        self.assertTrue(portfolio_handle.startswith("models/portfolio/"))

        response = self.client.delete(f"{url}/5", headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid image index")

        response = self.client.delete(f"{url}/0", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["portfolioImages"], [])
        self.assertEqual(self.h.images.destroyed, [portfolio_handle])

    def test_delete_releases_all_images_best_effort(self):
        created = self.create().json()
        self.client.post(
            f"/api/models/{created['id']}/portfolio",
            files=image_part(color="green"),
            headers=self.headers,
        )
        handles = [u["deletion_handle"] for u in self.h.images.uploads]
        self.h.images.fail_destroys = True

        response = self.client.delete(f"/api/models/{created['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Model deleted successfully")
        self.assertEqual(self.h.images.destroyed, handles)
        self.assertIsNone(self.h.store.get(MODELS, created["id"]))

    def test_writes_require_admin(self):
        response = self.client.post("/api/models", data={"name": "Amara"})
        self.assertEqual(response.status_code, 401)
        response = self.client.delete("/api/models/" + "0" * 32, headers={"Authorization": "Bearer junk"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Invalid token format or signature")


if __name__ == "__main__":
    unittest.main()
