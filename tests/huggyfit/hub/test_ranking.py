"""Tests for search result ranking."""

from huggyfit.hub.ranking import rank_model_ids


class TestRankModelIds:
    def test_empty_query_keeps_order(self):
        ids = ["b/model", "a/model"]
        assert rank_model_ids(ids, "") == ids

    def test_substring_hits_first(self):
        ids = ["mistralai/Mistral-7B", "Qwen/Qwen2.5-7B", "meta-llama/Llama-3.1-8B"]
        assert rank_model_ids(ids, "qwen")[0] == "Qwen/Qwen2.5-7B"

    def test_earlier_match_wins(self):
        ids = ["someone/my-llama", "llama-org/tiny"]
        assert rank_model_ids(ids, "llama") == ["llama-org/tiny", "someone/my-llama"]

    def test_shorter_id_wins_at_same_position(self):
        ids = ["org/llama-3-instruct-long", "org/llama-3"]
        assert rank_model_ids(ids, "llama") == ["org/llama-3", "org/llama-3-instruct-long"]

    def test_fuzzy_hits_follow_substring_hits(self):
        ids = ["q-w-e-n/scattered", "Qwen/Qwen2.5-0.5B"]
        assert rank_model_ids(ids, "qwen") == ["Qwen/Qwen2.5-0.5B", "q-w-e-n/scattered"]

    def test_non_matches_dropped(self):
        assert rank_model_ids(["google/gemma-2b"], "qwen") == []

    def test_case_insensitive(self):
        assert rank_model_ids(["TheBloke/LLAMA-GGUF"], "llama") == ["TheBloke/LLAMA-GGUF"]

    def test_fuzzy_hits_ordered_by_similarity(self):
        ids = ["quick-wild-eagle-net/long-model-name", "q-w-e-n/scattered"]
        assert rank_model_ids(ids, "qwen") == [
            "q-w-e-n/scattered",
            "quick-wild-eagle-net/long-model-name",
        ]

    def test_out_of_order_characters_dropped(self):
        assert rank_model_ids(["n-e-w-q/model"], "qwen") == []
