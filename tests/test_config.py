import pytest


class TestHelperConfig:
    def test_keys_are_case_insensitive_and_trimmed(self, env, helper_config):
        env.setenv("RAG_NAMESPACE", "  health ")

        assert helper_config.get_string_val("rag_namespace") == "health"

    def test_blank_counts_as_unset(self, env, helper_config):
        env.setenv("RAG_NAMESPACE", "   ")

        assert helper_config.get_optional_string_val("RAG_NAMESPACE") is None
        assert helper_config.get_string_val("RAG_NAMESPACE", default="all") == "all"

    def test_missing_required_value(self, env, helper_config):
        with pytest.raises(ValueError):
            helper_config.get_string_val("RAG_NAMESPACE")

    def test_numbers(self, env, helper_config):
        env.setenv("CACHE_TTL", "120")
        env.setenv("LLM_TEMPERATURE", "0.2")

        assert helper_config.get_number_val("CACHE_TTL") == 120
        assert isinstance(helper_config.get_number_val("CACHE_TTL"), int)
        assert helper_config.get_number_val("LLM_TEMPERATURE") == 0.2
        assert helper_config.get_number_val("RAG_TOP_K", default=5) == 5

    def test_invalid_number(self, env, helper_config):
        env.setenv("CACHE_TTL", "soon")

        with pytest.raises(ValueError):
            helper_config.get_number_val("CACHE_TTL")

    @pytest.mark.parametrize("raw, expected", [("true", True), ("YES", True), ("1", True), ("no", False)])
    def test_bools(self, env, helper_config, raw, expected):
        env.setenv("EMBED_OLLAMA_VERIFY_SSL", raw)

        assert helper_config.get_bool_val("EMBED_OLLAMA_VERIFY_SSL") is expected
