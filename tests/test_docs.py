#!/usr/bin/env python3
"""
Tests for loading the documentation source.
"""

import json
import os
import shutil
import tempfile
import unittest

from support_backend.app.docs import DocumentStore
from support_backend.app.config import Config


class TestDocumentStore(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp_dir, "docs.json")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def write(self, data):
        with open(self.path, "w", encoding="utf-8") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_bare_list(self):
        self.write([{"title": "Refunds", "content": "30 days"}])
        docs = DocumentStore(self.path).get_documents()
        self.assertEqual([(d.title, d.content) for d in docs], [("Refunds", "30 days")])

    def test_wrapped_list_keeps_order(self):
        self.write({"documentation": [
            {"title": "B", "content": "second"},
            {"title": "A", "content": "first"},
        ]})
        docs = DocumentStore(self.path).get_documents()
        self.assertEqual([d.title for d in docs], ["B", "A"])

    def test_not_an_array(self):
        self.write({"documentation": "oops"})
        self.assertEqual(DocumentStore(self.path).get_documents(), [])

    def test_invalid_json(self):
        self.write("{not json")
        self.assertEqual(DocumentStore(self.path).get_documents(), [])

    def test_missing_file(self):
        store = DocumentStore(os.path.join(self.tmp_dir, "missing.json"))
        self.assertEqual(store.get_documents(), [])

    def test_invalid_entries_skipped(self):
        self.write([{"title": "Good", "content": "ok"}, "just a string", {"title": "Partial"}])
        docs = DocumentStore(self.path).get_documents()
        self.assertEqual([d.title for d in docs], ["Good", "Partial"])
        self.assertEqual(docs[1].content, "")

    def test_extra_fields_kept(self):
        self.write([{"id": "kb-7", "title": "Refunds", "content": "30 days"}])
        doc = DocumentStore(self.path).get_documents()[0]
        self.assertEqual(doc.id, "kb-7")

    def test_loaded_once_until_reload(self):
        self.write([{"title": "Old", "content": "v1"}])
        store = DocumentStore(self.path)
        self.assertEqual(store.get_documents()[0].title, "Old")

        self.write([{"title": "New", "content": "v2"}, {"title": "Extra", "content": "v2"}])
        self.assertEqual(store.get_documents()[0].title, "Old")

        reloaded = store.reload()
        self.assertEqual([d.title for d in reloaded], ["New", "Extra"])
        self.assertEqual(store.get_documents(), reloaded)

    def test_bundled_documentation(self):
        docs = DocumentStore(Config.DOCS_PATH).get_documents()
        titles = [d.title for d in docs]
        self.assertIn("Refunds", titles)
        self.assertIn("We refund within 30 days of purchase.", docs[titles.index("Refunds")].content)


if __name__ == "__main__":
    unittest.main()
