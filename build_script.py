import sys
import argparse
from pathlib import Path

import llm_utils
from build_scripts_utils import is_number, require_text
from config import Config, config
from prompt_builders import build_generation_system_prompt, format_minutes
from script_errors import ScriptStudioError, ServiceUnavailable


def _log(msg: str) -> None:
    print(f"[GENERATE] {msg}")


def normalize_length_minutes(length_minutes) -> float:
    """
    Clamp the requested script length.

    Anything that is not a number, or lies outside [min, max], becomes the default.
    In-range values pass through unrounded (4.5 stays 4.5).
    """
    low, high = config.length_range
    if not is_number(length_minutes) or not (low <= length_minutes <= high):
        return config.default_length_minutes
    return length_minutes


def generate_script(prompt, length_minutes=None) -> str:
    """
    Generate a spoken video script for prompt.

    Args:
        prompt: What the video is about (non-empty string)
        length_minutes: Target length; normalized with normalize_length_minutes

    Returns:
        The script text as returned by the model.

    Raises:
        InvalidArgument: prompt is missing or blank.
        ServiceUnavailable: no LLM API key configured.
        UpstreamFailure: the model request failed.
    """
    prompt = require_text(prompt, "prompt")
    minutes = normalize_length_minutes(length_minutes)
    if not llm_utils.is_configured():
        raise ServiceUnavailable("Server is not configured with an LLM API key.")

    _log(f"Generating {format_minutes(minutes)} min script with {llm_utils.get_text_model_display()}")
    system_prompt = build_generation_system_prompt(minutes)
    script = llm_utils.complete(system_prompt, prompt)
    _log(f"✓ Script generated ({len(script)} chars)")
    return script


def main():
    parser = argparse.ArgumentParser(
        description="Generate a short spoken video script from a prompt.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python build_script.py "Explain how gravity works for kids"
  python build_script.py "History of coffee" coffee.txt --minutes 2
""",
    )
    parser.add_argument("prompt", help="What the video is about")
    parser.add_argument("output", nargs="?", help="Output text file (default: print to stdout)")
    parser.add_argument("--minutes", type=float, default=Config.default_length_minutes,
                        help=f"Target length in minutes, {Config.min_length_minutes}-{Config.max_length_minutes} "
                             f"(default: {Config.default_length_minutes})")
    args = parser.parse_args()

    try:
        script = generate_script(args.prompt, args.minutes)
    except ScriptStudioError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(script, encoding="utf-8")
        _log(f"Saved: {output_path}")
    else:
        print(script)


if __name__ == "__main__":
    main()
