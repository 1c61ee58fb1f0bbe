import unittest

from agency.db import Filter, SqlDocumentStore


class SqlDocumentStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store.
    """

    def setUp(self):
        self.db = SqlDocumentStore("sqlite+pysqlite:///:memory:")

    def test_insert_and_get(self):
        doc = self.db.insert("models", {"name": "Amara", "socialLinks": {"instagram": None}})
        self.assertEqual(len(doc["id"]), 32)
        self.assertIn("createdAt", doc)

        fetched = self.db.get("models", doc["id"])
        self.assertEqual(fetched["name"], "Amara")
        self.assertEqual(fetched["socialLinks"], {"instagram": None})
        self.assertIsNone(self.db.get("gallery", doc["id"]))

    def test_find_sorts_newest_first_and_filters(self):
        self.db.insert("models", {"name": "Amara", "category": "fashion"}, created_at=100.0)
        self.db.insert("models", {"name": "Bisi", "category": "runway"}, created_at=200.0)
        self.db.insert("models", {"name": "Amaka", "category": "fashion"}, created_at=300.0)

        names = [d["name"] for d in self.db.find("models")]
        self.assertEqual(names, ["Amaka", "Bisi", "Amara"])

        fashion = self.db.find("models", [Filter("category", "fashion")], skip=1, limit=1)
        self.assertEqual([d["name"] for d in fashion], ["Amara"])
        self.assertEqual(self.db.count("models", [Filter("name", "am", op="icontains")]), 2)
        self.assertEqual(len(self.db.find("models", created_since=150.0)), 2)

    def test_update_merges_and_delete(self):
        doc = self.db.insert("team", {"name": "Kemi", "role": "Booker"})
        updated = self.db.update("team", doc["id"], {"role": "Head booker"})
        self.assertEqual(updated["name"], "Kemi")
        self.assertEqual(updated["role"], "Head booker")
        self.assertEqual(self.db.get("team", doc["id"])["role"], "Head booker")

        self.assertIsNone(self.db.update("team", "0" * 32, {"role": "x"}))
        self.assertEqual(self.db.delete("team", doc["id"])["id"], doc["id"])
        self.assertIsNone(self.db.delete("team", doc["id"]))

    def test_ping(self):
        self.db.ping()


if __name__ == "__main__":
    unittest.main()
