"""CLI entry point for generating tests from the terminal."""

import argparse
import asyncio
from pathlib import Path

from pydantic import ValidationError

from testgen.config import Config
from testgen.display import (
    display_error,
    display_generated_tests,
    display_health,
    display_models_table,
    display_spinner_context,
)
from testgen.errors import TestGenError
from testgen.generator import TestGenerationService, create_service
from testgen.logging_config import configure_logging
from testgen.models import (
    ModelConfiguration,
    ProgrammingLanguage,
    TestGenerationRequest,
    TestingFramework,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser with generate, models, health, serve.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="testgen")
    subcommands = parser.add_subparsers(dest="command", required=True)

    gen_parser = subcommands.add_parser("generate", help="Generate tests for a file")
    gen_parser.add_argument("code_path")
    gen_parser.add_argument(
        "--language", required=True,
        choices=[lang.value for lang in ProgrammingLanguage],
    )
    gen_parser.add_argument(
        "--framework", required=True,
        choices=[fw.value for fw in TestingFramework],
    )
    gen_parser.add_argument("--model", help="Ollama model name")
    gen_parser.add_argument("--temperature", type=float)
    gen_parser.add_argument("--max-tokens", type=int)
    gen_parser.add_argument("--top-p", type=float)
    gen_parser.add_argument("-o", "--output", help="Write the test code to this file")

    subcommands.add_parser("models", help="List models installed in Ollama")
    subcommands.add_parser("health", help="Check that Ollama is reachable")

    serve_parser = subcommands.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host")
    serve_parser.add_argument("--port", type=int)
    return parser


def build_request(args: argparse.Namespace) -> TestGenerationRequest:
    """Create a validated generation request from parsed arguments.

    Args:
        args: Parsed ``generate`` arguments.

    Returns:
        Request with a model configuration only when options were given.
    """
    options = {
        "model": args.model,
        "temperature": args.temperature,
        "max_tokens": args.max_tokens,
        "top_p": args.top_p,
    }
    options = {key: value for key, value in options.items() if value is not None}
    return TestGenerationRequest(
        code=Path(args.code_path).read_text(encoding="utf-8"),
        language=args.language,
        framework=args.framework,
        model_options=ModelConfiguration(**options) if options else None,
    )


def run_generate(args: argparse.Namespace, service: TestGenerationService) -> None:
    """Generate tests for a source file and display them.

    Args:
        args: Parsed ``generate`` arguments.
        service: Generation service.
    """
    code_path = Path(args.code_path)
    if not code_path.exists():
        display_error(f"Code file not found: {code_path}")
        raise SystemExit(1)

    try:
        request = build_request(args)
    except UnicodeDecodeError as exc:
        display_error(f"Could not read {code_path}: file is not valid UTF-8")
        raise SystemExit(1) from exc
    except ValidationError as exc:
        display_error(f"Invalid request: {exc.errors()[0]['msg']}")
        raise SystemExit(1) from exc

    try:
        with display_spinner_context("Generating tests..."):
            result = asyncio.run(service.generate_tests(request))
    except TestGenError as exc:
        display_error(str(exc))
        raise SystemExit(1) from exc

    display_generated_tests(result)
    if args.output:
        Path(args.output).write_text(result.test_code + "\n")


def run_models(service: TestGenerationService) -> None:
    """Display the models installed on the Ollama host.

    Args:
        service: Generation service.
    """
    try:
        models = asyncio.run(service.list_models())
    except TestGenError as exc:
        display_error(str(exc))
        raise SystemExit(1) from exc
    display_models_table(models)


def run_health(service: TestGenerationService) -> None:
    """Display Ollama health and exit non-zero when unreachable.

    Args:
        service: Generation service.
    """
    healthy = asyncio.run(service.check_health())
    display_health(healthy, service.client.base_url)
    if not healthy:
        raise SystemExit(1)


def run_serve(args: argparse.Namespace, config: Config, service: TestGenerationService) -> None:
    """Serve the HTTP API with uvicorn.

    Args:
        args: Parsed ``serve`` arguments.
        config: Application configuration supplying host/port defaults.
        service: Generation service handed to the app.
    """
    import uvicorn

    from testgen.api import create_app

    uvicorn.run(
        create_app(service),
        host=args.host or config.api_host,
        port=args.port or config.api_port,
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI args and dispatch to the selected command.

    Args:
        argv: Optional argument vector for testing.
    """
    args = build_parser().parse_args(argv)
    config = Config()
    configure_logging(config.log_level, config.log_json)

    try:
        service = create_service(config)
    except (OSError, ValueError) as exc:
        display_error(f"Could not load templates: {exc}")
        raise SystemExit(1) from exc

    if args.command == "generate":
        run_generate(args, service)
    elif args.command == "models":
        run_models(service)
    elif args.command == "health":
        run_health(service)
    elif args.command == "serve":
        run_serve(args, config, service)


if __name__ == "__main__":
    main()
