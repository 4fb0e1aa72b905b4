#!/usr/bin/env python
"""
Marketing Relay CLI

Submit generation tasks, check on them and run form completions without the
frontend.
"""

import sys
import json
import asyncio
import argparse
from pathlib import Path
import logging
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

# Load .env file to environment variables
# This must be done before the settings objects are created
load_dotenv()

from services.completion_service import CompletionService
from services.errors import ProviderError
from services.response_normalizer import ResultKind, classify
from services.runway_service import RunwayService, TaskState
from services.task_poller import TaskPoller, TaskPollTimeout


# Version
__version__ = "1.0.0"


def setup_logging(level: str = "INFO"):
    """Setup basic logging configuration"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='[%(levelname)s] %(message)s'
    )


def print_success(message: str):
    """Print success message"""
    print(f"✓ {message}")


def print_error(message: str):
    """Print error message"""
    print(f"✗ {message}", file=sys.stderr)


def print_info(message: str):
    """Print info message"""
    print(f"ℹ {message}")


def print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def _submit(args) -> dict:
    async with RunwayService() as runway:
        if args.command == 'image':
            task_id = await runway.submit_text_to_image(
                prompt=args.prompt,
                ratio=args.ratio,
                seed=args.seed
            )
        else:
            task_id = await runway.submit_image_to_video(
                prompt=args.prompt,
                source_image=args.image,
                ratio=args.ratio,
                duration=args.duration,
                seed=args.seed
            )
        print_success(f"Task submitted: {task_id}")

        if not args.wait:
            return {"id": task_id}

        def on_update(payload: dict):
            progress = payload.get("progress")
            suffix = f" {float(progress) * 100:.0f}%" if isinstance(progress, (int, float)) else ""
            print(f"\r  status: {payload.get('status', '?')}{suffix}        ", end='', flush=True)

        poller = TaskPoller(runway, interval=args.interval, max_attempts=args.max_attempts)
        try:
            return await poller.wait(task_id, on_update=on_update)
        finally:
            print()


# ==================== Commands ====================

def cmd_submit(args):
    """Submit a text-to-image or image-to-video task"""
    setup_logging(args.log_level)

    try:
        payload = asyncio.run(_submit(args))
    except ValueError as e:
        print_error(str(e))
        return 2
    except ProviderError as e:
        print_error(str(e))
        if e.provider_response:
            print_json(e.provider_response)
        return 1
    except TaskPollTimeout as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print()
        print_info("Polling cancelled by user")
        return 130

    print_json(payload)
    if args.wait and TaskState.from_payload(payload) == TaskState.FAILED:
        return 1
    return 0


def cmd_status(args):
    """Read a task status once"""
    setup_logging(args.log_level)

    async def _status():
        async with RunwayService() as runway:
            return await runway.get_task_status(args.task_id)

    try:
        payload = asyncio.run(_status())
    except ProviderError as e:
        print_error(str(e))
        return 1

    print_json(payload)
    return 0


def cmd_complete(args):
    """Run one completion, from a free prompt or a marketing form"""
    setup_logging(args.log_level)

    if args.form:
        from backend.core.prompt_templates import get_template

        try:
            template = get_template(args.form)
        except KeyError:
            print_error(f"Unknown form: {args.form}")
            return 2
        try:
            form_data = json.loads(args.data) if args.data else {}
        except ValueError as e:
            print_error(f"--data is not valid JSON: {e}")
            return 2
        prompt = template.render(form_data if isinstance(form_data, dict) else {})
    elif args.prompt:
        prompt = args.prompt
    else:
        print_error("Give a prompt or --form")
        return 2

    async def _complete():
        async with CompletionService(model=args.model) as service:
            return await service.complete(prompt, instructions=args.instructions or "")

    result = asyncio.run(_complete())
    print_json(result)
    return 1 if classify(result) == ResultKind.ERROR else 0


# ==================== Main ====================

def _add_log_level(sub):
    sub.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level'
    )


def _add_wait_options(sub):
    sub.add_argument('--wait', action='store_true', help='Poll until the task succeeds or fails')
    sub.add_argument('--interval', type=float, help='Seconds between status reads (default: TASK_POLL_INTERVAL)')
    sub.add_argument('--max-attempts', type=int, help='Maximum status reads (default: TASK_POLL_MAX_ATTEMPTS)')


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Marketing Relay CLI - generation tasks and form completions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Submit a text-to-image task and wait for it
  python cli.py image "A red sneaker on white marble" --ratio 1920:1080 --wait

  # Animate an uploaded image
  python cli.py video "Slow dolly in" https://i.ibb.co/abc/frame.png --duration 5

  # Check a task
  python cli.py status 3f1c2a9e-...

  # Run a marketing form
  python cli.py complete --form branding/tagline --data '{"brandName":"Acme","count":3}'
"""
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Image command
    image_parser = subparsers.add_parser('image', help='Submit a text-to-image task')
    image_parser.add_argument('prompt', help='Image description')
    image_parser.add_argument('--ratio', help='Output aspect ratio, e.g. 1920:1080')
    image_parser.add_argument('--seed', type=int, help='Random seed')
    _add_wait_options(image_parser)
    _add_log_level(image_parser)
    image_parser.set_defaults(func=cmd_submit)

    # Video command
    video_parser = subparsers.add_parser('video', help='Submit an image-to-video task')
    video_parser.add_argument('prompt', help='Motion / scene description')
    video_parser.add_argument('image', help='URL of the first frame')
    video_parser.add_argument('--ratio', help='Output aspect ratio')
    video_parser.add_argument('--duration', type=int, help='Clip length in seconds')
    video_parser.add_argument('--seed', type=int, help='Random seed')
    _add_wait_options(video_parser)
    _add_log_level(video_parser)
    video_parser.set_defaults(func=cmd_submit)

    # Status command
    status_parser = subparsers.add_parser('status', help='Read a task status')
    status_parser.add_argument('task_id', help='Task id returned at submission')
    _add_log_level(status_parser)
    status_parser.set_defaults(func=cmd_status)

    # Complete command
    complete_parser = subparsers.add_parser('complete', help='Run one text completion')
    complete_parser.add_argument('prompt', nargs='?', help='User prompt')
    complete_parser.add_argument('--instructions', help='Text placed before the prompt')
    complete_parser.add_argument('--form', metavar='CATEGORY/FORM', help='Render a marketing form, e.g. ads/google')
    complete_parser.add_argument('--data', metavar='JSON', help='Form fields as a JSON object (with --form)')
    complete_parser.add_argument('--model', help='Override OPENROUTER_MODEL')
    _add_log_level(complete_parser)
    complete_parser.set_defaults(func=cmd_complete)

    # Parse arguments
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Execute command
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
