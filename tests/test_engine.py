"""Tests for the reaction feature lifecycle and message filter."""

import asyncio
import logging
import sqlite3
from unittest.mock import MagicMock

import discord
import pytest

from bot.client import ReactBot
from bot.feature import Feature
from core.constants import ApiOp
from core.errors import LoadError
from responders.engine import ReactionManager
from web.api import ApiRegistry

from conftest import make_message


@pytest.fixture
def api():
    return ApiRegistry()


@pytest.fixture
def messenger(client):
    """The bot side of the feature: filters plus emoji lookup."""
    filters = []
    client.register_filter.side_effect = filters.append
    client.unregister_filter.side_effect = filters.remove
    client.filters = filters
    return client


@pytest.fixture
def manager(messenger, api, db):
    return ReactionManager(messenger, api, db)


class TestLifecycle:
    """Test enable/disable."""

    def test_enable_loads_and_registers(self, manager, messenger, api, db):
        db.insert_or_update({"type": "text", "trigger": "hi"})

        manager.enable()

        assert manager.is_enabled
        assert len(manager.store) == 1
        assert messenger.filters == [manager.handle_message]
        for op in (ApiOp.REACTION_WRITE, ApiOp.REACTION_DELETE, ApiOp.REACTIONS_FETCH):
            assert api.has_api(op)

    def test_enable_resyncs_from_database(self, manager, db):
        manager.enable()
        manager.store.upsert({"trigger": "a"})
        manager.disable()

        db.insert_or_update({"trigger": "b"})
        manager.enable()
        assert sorted(rule.trigger for rule in manager.store.list()) == ["a", "b"]

    def test_disable_unregisters_and_clears(self, manager, messenger, api, db):
        db.insert_or_update({"trigger": "hi"})
        manager.enable()
        manager.disable()

        assert not manager.is_enabled
        assert messenger.filters == []
        assert not api.has_api(ApiOp.REACTIONS_FETCH)
        assert len(manager.store) == 0

    def test_load_failure_registers_nothing(self, messenger, api):
        db = MagicMock()
        db.select_all.side_effect = sqlite3.OperationalError("no such table")
        manager = ReactionManager(messenger, api, db)

        with pytest.raises(LoadError):
            manager.enable()

        assert not manager.is_enabled
        assert messenger.filters == []
        assert not api.has_api(ApiOp.REACTION_WRITE)


class TestHandleMessage:
    """Test the message filter."""

    @pytest.mark.asyncio
    async def test_matching_rule_is_delivered(self, manager, client):
        manager.store.upsert({"type": "keyword", "trigger": "cats", "insensitive": 1, "emote": "🐱", "response": "meow"})
        message = make_message("I love Cats!")

        assert await manager.handle_message(client, message) == 1
        await manager.dispatcher.wait_idle()

        message.add_reaction.assert_awaited_once_with("🐱")
        assert message.channel.send.await_args.args[0] == "meow"

    @pytest.mark.asyncio
    async def test_bot_authors_ignored(self, manager, client):
        manager.store.upsert({"trigger": "hi", "response": "hello"})
        message = make_message("hi", bot_author=True)

        assert await manager.handle_message(client, message) == 0
        await manager.dispatcher.wait_idle()
        message.channel.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_messages_ignored(self, manager, client):
        manager.store.upsert({"type": "message", "trigger": "x"})
        assert await manager.handle_message(client, make_message("   ")) == 0

    @pytest.mark.asyncio
    async def test_must_mention(self, manager, client):
        manager.store.upsert({"trigger": "hi", "response": "hello", "must_mention": 1})

        assert await manager.handle_message(client, make_message("hi")) == 0
        assert await manager.handle_message(client, make_message("hi", mention_bot=True)) == 1
        assert await manager.handle_message(client, make_message("hi", direct=True)) == 1
        await manager.dispatcher.wait_idle()

    @pytest.mark.asyncio
    async def test_one_rule_failing_does_not_block_another(self, manager, client, caplog):
        manager.store.upsert({"trigger": "party", "emote": ":missing: 🎉"})
        manager.store.upsert({"trigger": "party", "response": "let's go", "emote": "🥳"})
        message = make_message("party time")

        def react(emoji):
            if emoji == "🎉":
                raise discord.DiscordException("unknown emoji")

        message.add_reaction.side_effect = react

        with caplog.at_level(logging.WARNING, logger="reactbot.reactions"):
            assert await manager.handle_message(client, message) == 2
            await manager.dispatcher.wait_idle()

        reacted = sorted(call.args[0] for call in message.add_reaction.await_args_list)
        assert reacted == sorted(["🎉", "🥳"])
        message.channel.send.assert_awaited_once()
        assert "unable to resolve Discord emote `:missing:`" in caplog.text
        assert "unknown emoji" in caplog.text


class FailingFeature(Feature):
    name = "failing"

    def enable(self):
        raise LoadError("database unreachable")

    def disable(self):
        self.is_enabled = False


class RecordingFeature(Feature):
    name = "recording"

    def enable(self):
        self.is_enabled = True

    def disable(self):
        self.is_enabled = False


class TestReactBot:
    """Test the host client's filter registry and feature lifecycle."""

    def test_filter_registry(self, api):
        bot = ReactBot(api)

        async def message_filter(client, message):
            return None

        bot.register_filter(message_filter)
        bot.register_filter(message_filter)
        assert bot.filters == [message_filter]

        bot.unregister_filter(message_filter)
        bot.unregister_filter(message_filter)
        assert bot.filters == []

    def test_load_error_leaves_feature_disabled(self, api, caplog):
        bot = ReactBot(api)
        failing, recording = FailingFeature(), RecordingFeature()
        bot.add_feature(failing)
        bot.add_feature(recording)

        with caplog.at_level(logging.ERROR, logger="reactbot"):
            bot.enable_features()

        assert not failing.is_enabled
        assert recording.is_enabled
        assert "database unreachable" in caplog.text

        bot.disable_features()
        assert not recording.is_enabled

    def test_manager_wires_into_bot(self, api, db):
        bot = ReactBot(api)
        manager = ReactionManager(bot, api, db)
        bot.add_feature(manager)

        bot.enable_features()
        assert bot.filters == [manager.handle_message]

        bot.disable_features()
        assert bot.filters == []

    @pytest.mark.asyncio
    async def test_filter_errors_are_contained(self, api, caplog):
        bot = ReactBot(api)
        calls = []

        async def broken(client, message):
            raise RuntimeError("boom")

        async def working(client, message):
            calls.append(message)

        bot.register_filter(broken)
        bot.register_filter(working)
        message = make_message("hi")

        with caplog.at_level(logging.ERROR, logger="reactbot"):
            await bot._safe_filter(broken, message)
            await bot._safe_filter(working, message)

        assert calls == [message]
        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_filter_tasks_are_held_until_done(self, api):
        bot = ReactBot(api)
        release = asyncio.Event()
        seen = []

        async def slow(client, message):
            await release.wait()
            seen.append(message)

        bot.register_filter(slow)
        message = make_message("hi")

        await bot.on_message(message)
        assert len(bot._filter_tasks) == 1

        release.set()
        await asyncio.gather(*list(bot._filter_tasks))
        await asyncio.sleep(0)
        assert seen == [message]
        assert bot._filter_tasks == set()
