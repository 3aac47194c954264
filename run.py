"""Command-line entry point.

Usage (examples):
    python run.py generate "A haunted lighthouse keeper's last night" --style drawing --offline
    python run.py stories
    python run.py play <room_id>
    python run.py check level.json

Inside 'play' type commands:
    look
    open <object_id>
    choose <n>
"""
from __future__ import annotations
import argparse
import difflib
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from config import get_log_level, get_total_rooms
from escapeforge.errors import EscapeForgeError, InteractionError
from escapeforge.level import ART_STYLES, Level, collect_issues
from escapeforge.play import Outcome, RoomSession
from game.bootstrap import build_orchestrator, build_store

PROMPT = "> "

COMMAND_HELP = {
    'look': {'usage': 'look', 'desc': 'Lists the objects you can interact with right now.'},
    'open': {'usage': 'open <object_id>', 'desc': 'Opens an object and shows its text and options.'},
    'choose': {'usage': 'choose <n>', 'desc': 'Selects option n of the open object.'},
    'close': {'usage': 'close', 'desc': 'Closes the open object without choosing.'},
    'flags': {'usage': 'flags', 'desc': 'Shows the current state flags.'},
    'reset': {'usage': 'reset', 'desc': 'Restarts the current room from its initial state.'},
    'help': {'usage': 'help [command]', 'desc': 'Without arguments lists everything; with one shows its usage.'},
    'quit': {'usage': 'quit | exit', 'desc': 'Leaves the game.'},
}


def help_lines():
    lines = ["Available commands:"]
    max_usage = max(len(info['usage']) for info in COMMAND_HELP.values())
    for name, info in COMMAND_HELP.items():
        lines.append(f" {info['usage'].ljust(max_usage)}  - {info['desc']}")
    return lines


# ---------------- play ----------------

def _print_hotspots(session: RoomSession):
    hotspots = session.hotspots()
    if not hotspots:
        print("Nothing here seems interactive.")
        return
    print("You notice:")
    for obj in hotspots:
        print(f" - {obj.id}")


def _print_view(view):
    if view.text is not None:
        print(view.text.content)
    if view.object.media:
        print(f"[media] {view.object.media}")
    for i, option in enumerate(view.options, start=1):
        print(f"  {i}) {option.label}")


def _load_session(store, room_id: str):
    view = store.get_room_view(room_id)
    if view is None:
        print(f"Room not found: {room_id}")
        return None, None
    if view.room.level is None:
        print(f"Room {view.room.room_number} of '{view.story.prompt}' has not been generated yet.")
        return None, None
    session = RoomSession(Level.from_dict(view.room.level))
    print(f"=== Room {view.room.room_number}/{view.story.total_rooms}: {view.story.goal} ===")
    if session.level.room.background_image:
        print(f"[background] {session.level.room.background_image}")
    _print_hotspots(session)
    return view, session


def play_loop(room_id: str, store=None) -> Optional[Outcome]:
    """Interactive loop over one story, starting at ``room_id``.

    Returns the final outcome (WIN or LOSE), or None if the player quit.
    """
    store = store or build_store()
    view, session = _load_session(store, room_id)
    if session is None:
        return None
    print("Type 'help' for the command list.")

    while True:
        try:
            cmd = input(PROMPT).strip()
        except EOFError:
            return None
        if not cmd:
            continue
        verb, _, arg = cmd.partition(" ")
        verb, arg = verb.lower(), arg.strip()

        if verb in {"quit", "exit"}:
            print("Goodbye.")
            return None
        if verb == "help":
            if arg and arg in COMMAND_HELP:
                info = COMMAND_HELP[arg]
                print(f"{info['usage']}: {info['desc']}")
            else:
                for line in help_lines():
                    print(line)
            continue

        try:
            if verb == "look":
                _print_hotspots(session)
            elif verb == "open":
                _print_view(session.click(arg))
            elif verb == "close":
                session.close()
            elif verb == "flags":
                for name, value in sorted(session.flags.items()):
                    print(f" {name} = {value}")
            elif verb == "reset":
                session.reset()
                print("The room resets around you.")
                _print_hotspots(session)
            elif verb == "choose":
                if not arg.isdigit():
                    print("Usage: choose <n>")
                    continue
                result = session.choose(int(arg) - 1)
                if result.outcome is Outcome.CONTINUE:
                    if result.object_hidden:
                        print("It is gone.")
                    continue
                if result.outcome is Outcome.LOSE:
                    print("*** You failed. The room starts over. ***")
                    session.reset()
                    _print_hotspots(session)
                    continue
                if result.outcome is Outcome.ADVANCE and view.next_room_id:
                    if view.room.transition_asset:
                        print(f"[transition] {view.room.transition_asset}")
                    view, session = _load_session(store, view.next_room_id)
                    if session is None:
                        return None
                    continue
                print("*** You escaped! ***")
                return Outcome.WIN
            else:
                close = difflib.get_close_matches(verb, COMMAND_HELP.keys(), n=3)
                if close:
                    print(f"Unknown command '{verb}'. Did you mean: {', '.join(close)}?")
                else:
                    print(f"Unknown command '{verb}'. Type 'help' for the list.")
        except InteractionError as e:
            print(e)


# ---------------- subcommands ----------------

def cmd_generate(args) -> int:
    reference_image = Path(args.reference_image).read_bytes() if args.reference_image else None
    orchestrator = build_orchestrator(offline=args.offline)
    try:
        story = orchestrator.generate_story(args.premise, args.style, args.rooms,
                                            reference_image=reference_image)
    except (EscapeForgeError, ValueError) as e:
        print(f"Generation failed: {e}", file=sys.stderr)
        return 1
    first_room = orchestrator.store.first_room_id(story.id)
    print(f"Story {story.id} {story.status}. Start playing with: python run.py play {first_room}")
    return 0


def cmd_stories(args) -> int:
    store = build_store()
    stories = store.list_stories()
    if not stories:
        print("No stories yet.")
        return 0
    for story in stories:
        print(f"{story.id}  [{story.status}]  {story.art_style}  {story.prompt[:60]}")
        for room in store.rooms_for_story(story.id):
            state = "ready" if room.ready else "empty"
            print(f"    room {room.room_number}: {room.id} ({state})")
    return 0


def cmd_play(args) -> int:
    outcome = play_loop(args.room_id)
    return 0 if outcome in (None, Outcome.WIN) else 1


def cmd_check(args) -> int:
    try:
        payload = json.loads(Path(args.file).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read {args.file}: {e}", file=sys.stderr)
        return 2
    issues = collect_issues(payload)
    if not issues:
        print("OK: level is valid.")
        return 0
    for issue in issues:
        print(issue)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="escapeforge", description="Generate and play escape stories.")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a new story")
    gen.add_argument("premise")
    gen.add_argument("--style", choices=ART_STYLES, default="comic")
    gen.add_argument("--rooms", type=int, default=get_total_rooms())
    gen.add_argument("--offline", action="store_true", help="Use local template generators")
    gen.add_argument("--reference-image", metavar="PATH", help="Image guiding the first room")
    gen.set_defaults(func=cmd_generate)

    play = sub.add_parser("play", help="Play a story starting at a room")
    play.add_argument("room_id")
    play.set_defaults(func=cmd_play)

    stories = sub.add_parser("stories", help="List stories")
    stories.set_defaults(func=cmd_stories)

    check = sub.add_parser("check", help="Validate a level JSON file")
    check.add_argument("file")
    check.set_defaults(func=cmd_check)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=get_log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
