# src/interfaces/slack/__init__.py
"""Slack integration package for the OKR notifier.

This package registers the `/okr` slash command on an AsyncApp from
slack-bolt and runs it with AsyncSocketModeHandler.

Entry point: python -m src.interfaces.slack.bot
"""
