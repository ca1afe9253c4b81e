#!/usr/bin/env python3
"""
Tests for the lexical similarity scorer and documentation ranking.
"""

import unittest

from support_backend.app.similarity import (
    calculate_similarity,
    find_relevant_docs,
    get_edit_distance,
    score_relevance,
)
from support_backend.schemas.documents import Document


class TestEditDistance(unittest.TestCase):

    def test_classic_pairs(self):
        self.assertEqual(get_edit_distance("kitten", "sitting"), 3)
        self.assertEqual(get_edit_distance("flaw", "lawn"), 2)
        self.assertEqual(get_edit_distance("", "abc"), 3)
        self.assertEqual(get_edit_distance("abc", ""), 3)
        self.assertEqual(get_edit_distance("same", "same"), 0)


class TestCalculateSimilarity(unittest.TestCase):

    samples = ["", "a", "Refunds", "refund policy", "kitten", "sitting", "Password Reset"]

    def test_reflexive(self):
        for s in self.samples:
            self.assertEqual(calculate_similarity(s, s), 1.0, s)

    def test_case_insensitive(self):
        self.assertEqual(calculate_similarity("REFUNDS", "refunds"), 1.0)

    def test_symmetric(self):
        for a in self.samples:
            for b in self.samples:
                self.assertEqual(calculate_similarity(a, b), calculate_similarity(b, a), (a, b))

    def test_bounded(self):
        for a in self.samples:
            for b in self.samples:
                score = calculate_similarity(a, b)
                self.assertGreaterEqual(score, 0.0)
                self.assertLessEqual(score, 1.0)

    def test_substring_bonus(self):
        self.assertEqual(calculate_similarity("cat", "cats"), 0.9)
        self.assertEqual(calculate_similarity("refund", "We refund within 30 days"), 0.9)

    def test_empty_string_is_substring_of_anything(self):
        self.assertEqual(calculate_similarity("", "abc"), 0.9)

    def test_normalized_edit_distance(self):
        self.assertAlmostEqual(calculate_similarity("kitten", "sitting"), 4 / 7)
        self.assertEqual(calculate_similarity("abc", "xyz"), 0.0)


class TestFindRelevantDocs(unittest.TestCase):

    def setUp(self):
        self.docs = [
            {"title": "Refunds", "content": "We refund within 30 days of purchase."},
            {"title": "Password Reset", "content": "Click 'Forgot password' on the login page."},
            {"title": "Shipping", "content": "Standard shipping takes 3-5 business days."},
        ]

    def test_non_list_input_returns_empty(self):
        self.assertEqual(find_relevant_docs("refund", "not-an-array"), [])
        self.assertEqual(find_relevant_docs("refund", None), [])
        self.assertEqual(find_relevant_docs("refund", {"title": "Refunds"}), [])

    def test_empty_list_returns_empty(self):
        self.assertEqual(find_relevant_docs("refund", []), [])

    def test_exact_title_ranks_first(self):
        results = find_relevant_docs("refunds", self.docs)
        self.assertGreater(len(results), 0)
        self.assertEqual(results[0].title, "Refunds")
        self.assertGreaterEqual(results[0].similarity, 0.6)

    def test_refund_policy_query(self):
        results = find_relevant_docs("refund policy", self.docs)
        self.assertEqual(results[0].title, "Refunds")
        self.assertIn("30 days", results[0].content)

    def test_scores_at_or_above_threshold_and_sorted(self):
        for threshold in (0.0, 0.1, 0.3, 0.5, 0.9):
            results = find_relevant_docs("password", self.docs, threshold)
            scores = [d.similarity for d in results]
            self.assertTrue(all(s >= threshold for s in scores))
            self.assertEqual(scores, sorted(scores, reverse=True))

    def test_at_most_five_results(self):
        docs = [{"title": "Refunds", "content": f"policy {i}"} for i in range(8)]
        results = find_relevant_docs("refunds", docs)
        self.assertEqual(len(results), 5)

    def test_ties_keep_source_order(self):
        docs = [{"title": "Refunds", "content": f"policy {i}"} for i in range(1, 8)]
        results = find_relevant_docs("refunds", docs)
        self.assertEqual(
            [d.content for d in results],
            ["policy 1", "policy 2", "policy 3", "policy 4", "policy 5"],
        )

    def test_accepts_document_models(self):
        docs = [Document(**d) for d in self.docs]
        results = find_relevant_docs("shipping", docs)
        self.assertEqual(results[0].title, "Shipping")

    def test_missing_fields_treated_as_empty(self):
        results = find_relevant_docs("refunds", [{"title": "Refunds"}, {"content": 5}], 0.0)
        self.assertEqual(results[0].title, "Refunds")
        self.assertEqual(results[0].content, "")

    def test_source_fields_carried_through(self):
        docs = [
            {"id": "kb-1", "title": "Refunds", "content": "30 days", "tags": ["billing"]},
            Document(id="kb-2", title="Refunds policy", content="30 days"),
        ]
        results = find_relevant_docs("refunds", docs)
        self.assertEqual([d.id for d in results], ["kb-1", "kb-2"])
        self.assertEqual(results[0].tags, ["billing"])
        self.assertEqual(results[0].model_dump()["id"], "kb-1")

    def test_high_threshold_can_exclude_everything(self):
        self.assertEqual(find_relevant_docs("zzzz qqqq", self.docs, 0.99), [])


class TestScoreRelevance(unittest.TestCase):

    def test_word_fraction(self):
        self.assertEqual(score_relevance("refund policy", "Our refund rules"), 0.5)
        self.assertEqual(score_relevance("REFUND", "refund"), 1.0)

    def test_empty_query(self):
        self.assertEqual(score_relevance("", "anything"), 0.0)


if __name__ == "__main__":
    unittest.main()
