"""Smoke tests for the Textual app using its headless pilot.

The directory is a fake, so the app runs entirely offline.  Each test
drives a coroutine with asyncio.run to avoid needing an async plugin.
"""

import asyncio

from textual.widgets import OptionList

from huggyfit.config import HuggyFitConfig
from huggyfit.errors import ArchitectureFetchError, DirectoryError
from huggyfit.models.profiles import ArchitectureConfig, ModelSummary
from huggyfit.tui.app import HuggyFitApp

MODEL_IDS = ["Qwen/Qwen2.5-0.5B", "meta-llama/Llama-3.1-8B", "google/gemma-2-2b"]


class FakeDirectory:
    def __init__(self, fail_listing: bool = False):
        self.fail_listing = fail_listing

    def list_models(self, limit: int = 100) -> list[str]:
        if self.fail_listing:
            raise DirectoryError("Failed to fetch models: offline")
        return MODEL_IDS[:limit]

    def search_models(self, query: str, limit: int = 100) -> list[str]:
        return [m for m in MODEL_IDS if query.lower() in m.lower()]

    def fetch_model_summary(self, model_id: str) -> ModelSummary:
        return ModelSummary(model_id=model_id, author="test", parameters_b=0.49)

    def fetch_architecture(self, model_id: str) -> ArchitectureConfig:
        if "Qwen" in model_id:
            return ArchitectureConfig(
                hidden_size=896,
                num_attention_heads=14,
                num_hidden_layers=24,
                num_key_value_heads=2,
            )
        raise ArchitectureFetchError(model_id, "gated")


async def _settle(app: HuggyFitApp, pilot) -> None:
    """Wait for directory workers and outstanding calculations."""
    await app.workers.wait_for_complete()
    await pilot.pause()
    for _ in range(100):
        if not app.orchestrator.is_batch_pending():
            break
        await pilot.pause(0.02)
    await pilot.pause()


def test_lists_models_on_start():
    async def scenario():
        app = HuggyFitApp(directory=FakeDirectory(), config=HuggyFitConfig())
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            assert app.model_ids == MODEL_IDS
            assert app.query_one("#models", OptionList).option_count == 3

    asyncio.run(scenario())


def test_select_model_resolves_batch():
    async def scenario():
        app = HuggyFitApp(directory=FakeDirectory(), config=HuggyFitConfig())
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)

            assert app.summary is not None
            assert app.summary.model_id == "Qwen/Qwen2.5-0.5B"
            assert not app.orchestrator.is_batch_pending()
            keys = app.orchestrator.keys_for("Qwen/Qwen2.5-0.5B", 1, 4096)
            # 2 * 24 * 4096 * (896 // 14 * 2) * 2 * 2 bytes / 2^30 = 0.09375 GB
            assert app.orchestrator.get_cached_result(keys[0]) == 0.09

    asyncio.run(scenario())


def test_parameter_keys_trigger_new_batch():
    async def scenario():
        app = HuggyFitApp(directory=FakeDirectory(), config=HuggyFitConfig())
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)

            await pilot.press("plus")
            await _settle(app, pilot)
            assert app.users == 2

            await pilot.press("c")
            await _settle(app, pilot)
            assert app.context_length == 8192

            for key in app.orchestrator.keys_for("Qwen/Qwen2.5-0.5B", 2, 8192):
                assert app.orchestrator.get_cached_result(key) is not None

    asyncio.run(scenario())


def test_listing_error_is_shown():
    async def scenario():
        app = HuggyFitApp(directory=FakeDirectory(fail_listing=True), config=HuggyFitConfig())
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            assert isinstance(app.error, DirectoryError)
            assert app.model_ids == []

    asyncio.run(scenario())
