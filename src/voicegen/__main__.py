"""voicegen command line entry point.

Usage:
    python -m voicegen [OPTIONS] COMMAND ...

Commands:
    generate TEXT    Generate narrated audio for TEXT ("-" reads stdin)
    voices           List available voices
    stored [ID]      List stored audio, or show one file
    content          Generate marketing content for a business

Options:
    --config PATH     Path to YAML config file
    --profile NAME    Profile name (dev, prod, test)
    --log-level LVL   Override the configured log level
    --version         Show version
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict, replace
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config.loader import load_config
from .config.profiles import detect_profile
from .errors import ContentGenerationError, VoicegenError

# Load .env from the project root (parent of src/), else the current directory
_env_file = Path(__file__).parent.parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="voicegen",
        description="voicegen - narrated audio with layered TTS fallbacks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m voicegen generate "Hello world. This is a test."
  python -m voicegen generate --language ne --local -o out.mp3 "..."
  python -m voicegen voices --language en
  python -m voicegen stored --local
  python -m voicegen content --name "Himalayan Cafe" --type cafe --location Pokhara

Environment:
  VOICEGEN_PROFILE    Set profile (dev, prod, test)
""",
    )

    parser.add_argument("--config", type=Path, help="Path to YAML config file", metavar="PATH")
    parser.add_argument("--profile", choices=["dev", "prod", "test"], help="Configuration profile to use")
    parser.add_argument("--log-level", help="Override log level (DEBUG, INFO, ...)", metavar="LEVEL")
    parser.add_argument("--version", action="version", version=f"voicegen v{__version__}")

    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate narrated audio")
    generate.add_argument("text", help='Text to narrate, or "-" to read stdin')
    generate.add_argument("--language", default="en", help="Language code (default: en)")
    generate.add_argument("--voice", default="default", help="Voice id (see `voices`)")
    generate.add_argument("--speed", type=float, default=1.0, help="Speed factor (default: 1.0)")
    generate.add_argument("--local", action="store_true", help="Store audio locally instead of uploading")
    generate.add_argument("--mock", action="store_true", help="Use the mock TTS strategy")
    generate.add_argument("-o", "--output", type=Path, metavar="PATH", help="Write the audio to PATH instead of storing it")

    voices = commands.add_parser("voices", help="List available voices")
    voices.add_argument("--language", help="Only voices for this language")
    voices.add_argument("--content-type", help="Also show the recommended voice for this content type")

    stored = commands.add_parser("stored", help="List stored audio, or show one file")
    stored.add_argument("public_id", nargs="?", help="Public id of one stored file")
    stored.add_argument("--local", action="store_true", help="Read the local uploads directory")
    stored.add_argument("--limit", type=int, default=100, help="Maximum files to list (default: 100)")

    content = commands.add_parser("content", help="Generate marketing content")
    content.add_argument("--name", required=True, help="Business name")
    content.add_argument("--type", required=True, dest="business_type", help="Business type")
    content.add_argument("--location", required=True, help="Business location")
    content.add_argument("--products", help="Products or services")
    content.add_argument("--customers", help="Target customers")

    return parser.parse_args(argv)


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def cmd_generate(args: argparse.Namespace, config, logger: logging.Logger) -> int:
    from .pipeline.service import GenerationOptions, build_service

    text = sys.stdin.read() if args.text == "-" else args.text

    if args.local:
        config = replace(config, storage=replace(config.storage, backend="local"))

    service = build_service(config, use_mock=args.mock)
    options = GenerationOptions(voice_id=args.voice, speed_factor=args.speed, language=args.language)

    if args.output is None:
        _emit(service.generate_audio(text, options).to_dict())
        return 0

    # Write the audio to a file instead of storing it
    outcome = service.synthesize(service.prepare(text, options))
    args.output.write_bytes(outcome.audio_bytes)
    logger.info(f"Wrote {outcome.size_bytes} bytes to {args.output}")
    _emit(
        {
            "output": str(args.output),
            "method": outcome.method_used,
            "format": outcome.format.value,
            "size_bytes": outcome.size_bytes,
            "duration": outcome.duration_estimate_seconds,
            "chunk_methods": list(outcome.chunk_methods),
        }
    )
    return 0


def cmd_voices(args: argparse.Namespace) -> int:
    from .tts.voices import list_voices, recommend_voice

    payload: dict[str, object] = {"voices": [asdict(v) for v in list_voices(args.language)]}
    if args.content_type:
        payload["recommended"] = recommend_voice(args.content_type, args.language or "en")
    _emit(payload)
    return 0


def cmd_stored(args: argparse.Namespace, config, logger: logging.Logger) -> int:
    from .pipeline.service import build_sink

    if args.local:
        config = replace(config, storage=replace(config.storage, backend="local"))

    sink = build_sink(config)
    if args.public_id is None:
        _emit({"files": [asdict(ref) for ref in sink.list_artifacts(args.limit)]})
        return 0

    ref = sink.get(args.public_id)
    if ref is None:
        logger.error(f"No stored audio with id {args.public_id}")
        return 1
    _emit(asdict(ref))
    return 0


def cmd_content(args: argparse.Namespace, config) -> int:
    from .content.generator import BusinessDetails, MarketingContentGenerator

    generator = MarketingContentGenerator(config.content)
    result = generator.generate(
        BusinessDetails(
            business_name=args.name,
            business_type=args.business_type,
            location=args.location,
            products_services=args.products,
            target_customers=args.customers,
        )
    )
    _emit(asdict(result))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for voicegen.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_args(argv)

    # Load configuration
    try:
        if args.config:
            config = load_config(path=args.config)
        else:
            config = load_config(profile=args.profile or detect_profile().value)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1

    setup_logging(args.log_level or config.logging.level)
    logger = logging.getLogger("voicegen")
    logger.debug(f"voicegen v{__version__}, profile {args.profile or detect_profile().value}")

    try:
        if args.command == "generate":
            return cmd_generate(args, config, logger)
        if args.command == "voices":
            return cmd_voices(args)
        if args.command == "stored":
            return cmd_stored(args, config, logger)
        return cmd_content(args, config)
    except ContentGenerationError as e:
        logger.error(str(e))
        return 2
    except (VoicegenError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
