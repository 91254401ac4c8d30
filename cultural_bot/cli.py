#!/usr/bin/env python3
"""Terminal chat for CulturalBot

Usage:
  cultural-bot                          # interactive chat
  cultural-bot --city paris --once "what's the weather like?"
  cultural-bot --status
  cultural-bot --overview --city delhi

In the interactive loop: /city NAME, /status, /overview, /quit.
Set OPENWEATHER_API_KEY, HUGGINGFACE_TOKEN and NEWS_API_KEY (or a .env file)
for live data; without them every answer comes from the curated demo tables.
"""
import argparse
import asyncio
import json
import sys

import aiohttp

from cultural_bot.config import get_config, setup_logging
from cultural_bot.models import BotReply, CityOverview
from cultural_bot.src.assistant import (
    QUICK_ACTIONS,
    TravelAssistant,
    format_article,
    format_place,
    format_suggestion,
    format_weather,
)


def format_reply(reply: BotReply) -> str:
    blocks = []
    for message in reply.messages:
        blocks.append(f"[{message.sender}]\n{message.text}")
    return "\n\n".join(blocks)


def format_overview(overview: CityOverview) -> str:
    def tag(key):
        return "LIVE" if overview.live.get(key) else "demo"

    parts = [f"=== {overview.city} ===", f"Weather ({tag('weather')}):", format_weather(overview.weather)]
    parts.append(f"\nCultural sites ({tag('places')}):")
    parts.extend(format_place(p) for p in overview.culture)
    parts.append("\nTraditional clothing:")
    parts.extend(format_suggestion(s) for s in overview.clothing)
    parts.append(f"\nNews & events ({tag('news')}):")
    parts.extend(format_article(a) for a in overview.news)
    return "\n".join(parts)


async def _command(assistant: TravelAssistant, line: str):
    """Handle a slash command. Returns output text, or None to quit."""
    cmd, _, arg = line[1:].partition(" ")
    cmd = cmd.lower()
    if cmd in ("quit", "exit", "q"):
        return None
    if cmd == "city":
        if not arg.strip():
            return f"Current city: {assistant.city_name}"
        return f"🌍 Switched to {assistant.set_city(arg)}! What would you like to explore?"
    if cmd == "status":
        return json.dumps(assistant.api_status(), indent=2, ensure_ascii=False)
    if cmd == "overview":
        return format_overview(await assistant.city_overview())
    if cmd in [category for _, category in QUICK_ACTIONS]:
        return format_reply(await assistant.quick_action(cmd))
    actions = ", ".join(f"/{category}" for _, category in QUICK_ACTIONS)
    return f"Commands: /city NAME, /status, /overview, /quit, {actions}"


async def chat(assistant: TravelAssistant) -> None:
    print(format_reply(assistant.welcome()))
    while True:
        try:
            line = await asyncio.to_thread(input, "\nyou> ")
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue
        if line.startswith("/"):
            out = await _command(assistant, line)
            if out is None:
                break
            print(out)
            continue
        print(format_reply(await assistant.handle_message(line)))


async def run(args) -> int:
    config = get_config()
    async with aiohttp.ClientSession() as session:
        assistant = TravelAssistant.create(config, session=session, city=args.city)
        if args.status:
            print(json.dumps(assistant.api_status(), indent=2, ensure_ascii=False))
        elif args.overview:
            print(format_overview(await assistant.city_overview()))
        elif args.once:
            print(format_reply(await assistant.handle_message(args.once)))
        else:
            await chat(assistant)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="CulturalBot travel chat")
    parser.add_argument('--city', type=str, default=None, help='start in this city (default: DEFAULT_CITY)')
    parser.add_argument('--once', type=str, metavar='MESSAGE', help='answer a single message and exit')
    parser.add_argument('--status', action='store_true', help='print provider status and exit')
    parser.add_argument('--overview', action='store_true', help='print the city overview and exit')
    args = parser.parse_args(argv)

    setup_logging()
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == '__main__':
    sys.exit(main())
