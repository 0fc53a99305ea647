"""Tests for the playback script engine."""

import asyncio

import pytest
from conftest import SleepRecorder, settle

from uipatch.config import PlaybackConfig
from uipatch.events import ObservabilityEventType
from uipatch.playback import PlaybackCallbacks, PlaybackEngine
from uipatch.script import CONTACT_FORM_SCRIPT
from uipatch.types import Phase

PROMPT = "Hi!"


def _config(**overrides) -> PlaybackConfig:
    return PlaybackConfig(prompt=PROMPT, **overrides)


class Observer:
    def __init__(self):
        self.typed = []
        self.phases = []
        self.updates = []
        self.completions = []

    def callbacks(self, **overrides) -> PlaybackCallbacks:
        callbacks = PlaybackCallbacks(
            on_typing=self.typed.append,
            on_phase=self.phases.append,
            on_update=self.updates.append,
            on_complete=self.completions.append,
        )
        for name, value in overrides.items():
            setattr(callbacks, name, value)
        return callbacks


class TestPlaybackRun:
    @pytest.mark.asyncio
    async def test_full_run(self, sleep_recorder):
        obs = Observer()
        engine = PlaybackEngine(
            config=_config(), callbacks=obs.callbacks(), sleep=sleep_recorder
        )
        assert engine.phase == Phase.TYPING
        assert engine.tree is None
        assert engine.stage_index == -1

        await engine.run()

        assert engine.phase == Phase.COMPLETE
        assert not engine.cancelled
        assert obs.typed == ["H", "Hi", "Hi!"]
        assert obs.phases == [Phase.STREAMING, Phase.COMPLETE]
        assert len(obs.updates) == len(CONTACT_FORM_SCRIPT)
        assert obs.completions == [False]
        assert engine.stage_index == len(CONTACT_FORM_SCRIPT) - 1
        assert engine.tree is CONTACT_FORM_SCRIPT[-1].tree
        assert engine.typed_prompt == PROMPT
        await engine.wait()

    @pytest.mark.asyncio
    async def test_sleep_schedule(self, sleep_recorder):
        config = _config()
        await PlaybackEngine(config=config, sleep=sleep_recorder).run()

        assert sleep_recorder.calls == (
            [config.char_interval] * len(PROMPT)
            + [config.typing_pause]
            + [config.stage_interval] * len(CONTACT_FORM_SCRIPT)
            + [config.complete_pause]
        )

    @pytest.mark.asyncio
    async def test_updates_match_script(self, sleep_recorder):
        obs = Observer()
        engine = PlaybackEngine(
            config=_config(), callbacks=obs.callbacks(), sleep=sleep_recorder
        )
        await engine.run()

        for i, (update, stage) in enumerate(zip(obs.updates, CONTACT_FORM_SCRIPT)):
            assert update.tree is stage.tree
            assert update.line == stage.line
            assert update.lines == tuple(s.line for s in CONTACT_FORM_SCRIPT[: i + 1])
            assert update.session_id == engine.id
        assert engine.lines == tuple(s.line for s in CONTACT_FORM_SCRIPT)

    @pytest.mark.asyncio
    async def test_custom_script(self, sleep_recorder):
        script = CONTACT_FORM_SCRIPT[:2]
        obs = Observer()
        engine = PlaybackEngine(
            script, config=_config(), callbacks=obs.callbacks(), sleep=sleep_recorder
        )
        await engine.run()
        assert len(obs.updates) == 2

    @pytest.mark.asyncio
    async def test_run_twice(self, sleep_recorder):
        engine = PlaybackEngine(config=_config(), sleep=sleep_recorder)
        await engine.run()
        with pytest.raises(RuntimeError):
            await engine.run()

    @pytest.mark.asyncio
    async def test_real_sleep_with_zero_intervals(self):
        config = _config(char_interval=0, typing_pause=0, stage_interval=0, complete_pause=0)
        engine = PlaybackEngine(config=config)
        engine.start()
        await engine.wait()
        assert engine.phase == Phase.COMPLETE
        assert engine.stage_index == len(CONTACT_FORM_SCRIPT) - 1


class TestPlaybackCancel:
    @pytest.mark.asyncio
    async def test_cancel_after_second_stage_freezes(self, sleep_recorder):
        obs = Observer()
        engine = None

        def on_update(update):
            obs.updates.append(update)
            if len(update.lines) == 2:
                engine.cancel()

        engine = PlaybackEngine(
            config=_config(),
            callbacks=obs.callbacks(on_update=on_update),
            sleep=sleep_recorder,
        )
        await engine.run()

        assert engine.cancelled
        assert engine.phase == Phase.COMPLETE
        assert engine.stage_index == 1
        assert engine.tree is CONTACT_FORM_SCRIPT[1].tree
        assert len(obs.updates) == 2
        assert obs.completions == [True]

        calls = len(sleep_recorder.calls)
        await settle()
        assert len(sleep_recorder.calls) == calls

    @pytest.mark.asyncio
    async def test_cancel_while_typing(self, sleep_recorder):
        obs = Observer()
        engine = PlaybackEngine(
            config=_config(), callbacks=obs.callbacks(), sleep=sleep_recorder
        )
        task = engine.start()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        engine.cancel()
        await engine.wait()

        assert task.done()
        assert engine.phase == Phase.COMPLETE
        assert engine.tree is None
        assert obs.updates == []
        assert obs.phases == [Phase.COMPLETE]
        assert obs.completions == [True]

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self, sleep_recorder):
        obs = Observer()
        engine = PlaybackEngine(
            config=_config(), callbacks=obs.callbacks(), sleep=sleep_recorder
        )
        engine.start()
        await settle(3)
        engine.cancel()
        engine.cancel()
        await engine.wait()
        assert obs.completions == [True]

    @pytest.mark.asyncio
    async def test_cancel_after_complete_is_noop(self, sleep_recorder):
        obs = Observer()
        engine = PlaybackEngine(
            config=_config(), callbacks=obs.callbacks(), sleep=sleep_recorder
        )
        await engine.run()
        engine.cancel()
        assert not engine.cancelled
        assert obs.completions == [False]

    @pytest.mark.asyncio
    async def test_cancel_interrupts_directly_awaited_run(self):
        never = asyncio.Event()
        sleeps = []

        async def sleep(seconds):
            sleeps.append(seconds)
            await never.wait()

        obs = Observer()
        engine = PlaybackEngine(config=_config(), callbacks=obs.callbacks(), sleep=sleep)
        runner = asyncio.create_task(engine.run())
        await settle(3)
        assert sleeps == [engine.config.char_interval]

        engine.cancel()
        done, _ = await asyncio.wait([runner], timeout=1)

        assert runner in done
        assert runner.cancelled()
        assert engine.phase == Phase.COMPLETE
        assert obs.completions == [True]
        assert len(sleeps) == 1

    @pytest.mark.asyncio
    async def test_task_cancellation_completes(self, sleep_recorder):
        obs = Observer()
        engine = PlaybackEngine(
            config=_config(), callbacks=obs.callbacks(), sleep=sleep_recorder
        )
        task = engine.start()
        await settle(3)
        task.cancel()
        await engine.wait()

        assert engine.cancelled
        assert engine.phase == Phase.COMPLETE
        assert obs.completions == [True]


class TestPlaybackEvents:
    @pytest.mark.asyncio
    async def test_event_sequence(self):
        events = []
        engine = PlaybackEngine(
            config=_config(), on_event=events.append, sleep=SleepRecorder()
        )
        await engine.run()

        types = [e.type for e in events]
        stage_events = [
            ObservabilityEventType.PLAYBACK_STAGE,
            ObservabilityEventType.PATCH_APPLIED,
        ] * len(CONTACT_FORM_SCRIPT)
        assert types == [
            ObservabilityEventType.SESSION_START,
            ObservabilityEventType.PLAYBACK_TYPING_START,
            ObservabilityEventType.PLAYBACK_TYPING_END,
            *stage_events,
            ObservabilityEventType.COMPLETE,
            ObservabilityEventType.SESSION_SUMMARY,
            ObservabilityEventType.SESSION_END,
        ]
        assert all(e.meta["kind"] == "playback" for e in events)
        assert events[-1].meta["status"] == "completed"
