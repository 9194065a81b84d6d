"""Tests for the calculation strategy: cache, precise path, fallback.

The directory is a counting fake so tests can assert exactly when the
network would have been touched.
"""

from huggyfit.cache.store import ArchitectureConfigCache, ResultCache
from huggyfit.cache.strategy import CalculationStrategy
from huggyfit.errors import ArchitectureFetchError
from huggyfit.models.profiles import ArchitectureConfig, CalculationKey
from huggyfit.models.results import CalculationMethod

MHA_7B = ArchitectureConfig(
    hidden_size=4096,
    num_attention_heads=32,
    num_hidden_layers=32,
    num_key_value_heads=32,
)


class FakeDirectory:
    """Architecture source that records calls and can be told to fail."""

    def __init__(self, config: ArchitectureConfig | None = None):
        self.config = config
        self.calls: list[str] = []

    def fetch_architecture(self, model_id: str) -> ArchitectureConfig:
        self.calls.append(model_id)
        if self.config is None:
            raise ArchitectureFetchError(model_id, "401 gated repo")
        return self.config


def _strategy(directory: FakeDirectory, **kwargs) -> CalculationStrategy:
    return CalculationStrategy(
        results=ResultCache(),
        configs=ArchitectureConfigCache(),
        directory=directory,
        **kwargs,
    )


def _key(model_id: str = "meta-llama/Llama-2-7b-hf", **overrides) -> CalculationKey:
    fields = {"users": 1, "context_length": 4096, "data_type": "fp16"}
    fields.update(overrides)
    return CalculationKey(model_id=model_id, **fields)


class TestPrecisePath:
    def test_precise_formula(self):
        strategy = _strategy(FakeDirectory(MHA_7B))
        assert strategy.resolve(_key(), 6.74) == 4.0
        assert strategy.last_method(_key()) is CalculationMethod.PRECISE

    def test_fetched_config_is_remembered(self):
        directory = FakeDirectory(MHA_7B)
        configs = ArchitectureConfigCache()
        strategy = CalculationStrategy(ResultCache(), configs, directory)

        strategy.resolve(_key(data_type="fp16"), 6.74)
        strategy.resolve(_key(data_type="int8"), 6.74)
        strategy.resolve(_key(data_type="int4"), 6.74)

        assert directory.calls == ["meta-llama/Llama-2-7b-hf"]
        assert configs.get("meta-llama/Llama-2-7b-hf") == MHA_7B

    def test_cached_config_skips_fetch(self):
        directory = FakeDirectory(None)
        configs = ArchitectureConfigCache()
        configs.put("meta-llama/Llama-2-7b-hf", MHA_7B)
        strategy = CalculationStrategy(ResultCache(), configs, directory)

        assert strategy.resolve(_key(), 6.74) == 4.0
        assert directory.calls == []


class TestIdempotence:
    def test_second_call_hits_cache(self):
        directory = FakeDirectory(MHA_7B)
        strategy = _strategy(directory)

        first = strategy.resolve(_key(), 6.74)
        second = strategy.resolve(_key(), 6.74)

        assert first == second
        assert len(directory.calls) == 1

    def test_estimated_result_is_also_cached(self):
        directory = FakeDirectory(None)
        strategy = _strategy(directory)

        strategy.resolve(_key(), 3.0)
        strategy.resolve(_key(), 3.0)

        assert len(directory.calls) == 1

    def test_alias_key_hits_same_entry(self):
        directory = FakeDirectory(MHA_7B)
        strategy = _strategy(directory)
        strategy.resolve(_key(data_type="q4"), 6.74)
        assert strategy.results.get(_key(data_type="int4")) == 1.0


class TestFallback:
    def test_fetch_failure_uses_estimate(self):
        strategy = _strategy(FakeDirectory(None))
        # 0.5 * (4096 / 1000) * 1.0 * 1 = 2.048 -> 2.05
        assert strategy.resolve(_key(), 3.0) == 2.05
        assert strategy.last_method(_key()) is CalculationMethod.ESTIMATED

    def test_zero_attention_heads_routes_to_estimate(self):
        configs = ArchitectureConfigCache()
        configs.put(
            "broken/model",
            ArchitectureConfig(hidden_size=4096, num_attention_heads=0, num_hidden_layers=32),
        )
        strategy = CalculationStrategy(ResultCache(), configs, FakeDirectory(None))

        assert strategy.resolve(_key("broken/model"), 3.0) == 2.05
        assert strategy.last_method(_key("broken/model")) is CalculationMethod.ESTIMATED

    def test_use_estimation_skips_network(self):
        directory = FakeDirectory(MHA_7B)
        strategy = _strategy(directory, use_estimation=True)

        # 1.0 * 4.096 = 4.10 (7B is in the medium tier)
        assert strategy.resolve(_key(), 7.0) == 4.1
        assert directory.calls == []

    def test_invalid_config_from_directory_uses_estimate(self):
        class RawDirectory:
            def fetch_architecture(self, model_id: str) -> ArchitectureConfig:
                return ArchitectureConfig.from_hf_config(
                    {"hidden_size": 4096, "num_attention_heads": -1, "num_hidden_layers": 32}
                )

        strategy = CalculationStrategy(ResultCache(), ArchitectureConfigCache(), RawDirectory())
        assert strategy.resolve(_key("odd/model"), 3.0) == 2.05
        assert strategy.last_method(_key("odd/model")) is CalculationMethod.ESTIMATED

    def test_last_method_unknown_key(self):
        assert _strategy(FakeDirectory(None)).last_method(_key()) is None
