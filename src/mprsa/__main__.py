"""The Command Line Interface for the engine, including Interactive elements.

Every subcommand declares the options it needs. Options missing from the command line are prompted for, unless
non-interactive mode is active, in which case their defaults are used and options without one are an error.

Typical usage example:

    mprsa keygen --keysize 256
    OR
    python -m mprsa roundtrip --message "P:text.txt" -n
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import typing

import mprsa
from mprsa import benchmark
from mprsa import keygen


class Option(typing.NamedTuple):
    """How a CLI option is described, converted and defaulted.

    Attributes:
        description: Help text, shown by argparse and by the prompt.
        convert: Callable turning the typed text into the option value.
        choices: Allowed values, if the option is a pick from a list.
        default: Value used when the option is left out. None means the option is required.
        advanced: Advanced options take their default silently unless advanced mode is on.
    """
    description: str
    convert: typing.Callable[[str], typing.Any] = str
    choices: tuple[str, ...] | None = None
    default: typing.Any = None
    advanced: bool = False


SUBCOMMANDS: dict[str, str] = {
    "keygen": "Generate and print a key pair.",
    "roundtrip": "Sign, encrypt, decrypt and verify a message with two fresh key pairs, reporting timings.",
    "benchmark": "Time repeated key pair generation.",
}

OPTIONS: dict[str, Option] = {
    "subcommand": Option("The available subcommands.", choices=tuple(SUBCOMMANDS)),
    "message": Option("Message, or path to a file holding the payload when prefixed with `P:`."),
    "keysize": Option("Modulus size (in bits).",
                      choices=("128", "256", "384", "512", "1024"),
                      default=str(keygen.DEFAULT_KEY_SIZE)),
    "trials": Option("Primality test trials per prime candidate.", int, default=keygen.TRIALS, advanced=True),
    "runs": Option("Number of benchmark runs.", int, default=10),
}

REQUIRES: dict[str, tuple[str, ...]] = {
    "keygen": ("keysize", "trials"),
    "roundtrip": ("message", "keysize", "trials"),
    "benchmark": ("keysize", "runs", "trials"),
}


def build_parser() -> argparse.ArgumentParser:
    sizing = argparse.ArgumentParser(add_help=False)
    sizing.add_argument("--keysize", "-k", choices=OPTIONS["keysize"].choices, help=OPTIONS["keysize"].description)
    sizing.add_argument("--trials", "-t", type=OPTIONS["trials"].convert, help=OPTIONS["trials"].description)
    parser = argparse.ArgumentParser(prog="mprsa")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {mprsa.__version__}")
    parser.add_argument("--non-interactive", "-n", action="store_true", help="Never prompt, use defaults")
    parser.add_argument("--advanced", "-a", action="store_true", help="Prompt for advanced options too")
    parser.add_argument("--verbose", "-V", action="store_true", help="Log progress and sampling details")
    commands = parser.add_subparsers(dest="subcommand", title="Subcommands")
    commands.add_parser("keygen", parents=[sizing], help=SUBCOMMANDS["keygen"])
    roundtrip = commands.add_parser("roundtrip", parents=[sizing], help=SUBCOMMANDS["roundtrip"])
    roundtrip.add_argument("--message", "-m", help=OPTIONS["message"].description)
    bench = commands.add_parser("benchmark", parents=[sizing], help=SUBCOMMANDS["benchmark"])
    bench.add_argument("--runs", "-r", type=OPTIONS["runs"].convert, help=OPTIONS["runs"].description)
    return parser


def ask(name: str, interactive: bool, advanced: bool, prntr: typing.Callable = print) -> typing.Any:
    """Resolves an option missing from the command line.

    Args:
        name: Key into `OPTIONS`.
        interactive: Whether prompting is allowed.
        advanced: Whether advanced options are prompted for.
        prntr: Output function for the prompt text.

    Returns:
        The converted option value.

    Raises:
        IOError: If the option has no default and prompting is not allowed.
    """
    option = OPTIONS[name]
    if option.default is not None and (not interactive or (option.advanced and not advanced)):
        return option.default
    if not interactive:
        raise IOError(f"Argument {name} is missing and non-interactive mode is active.")
    prntr(f"Please specify the {name}! {option.description}")
    for choice in option.choices or ():
        marker = " (Default)" if choice == option.default else ""
        prntr(f"  {choice}{' - ' + SUBCOMMANDS[choice] if choice in SUBCOMMANDS else ''}{marker}")
    if option.default is not None:
        prntr(f"Press enter to accept the default ({option.default}).")
    while True:
        answer = input(f"{name}: ").strip()
        if not answer:
            if option.default is not None:
                return option.default
            prntr("Please provide a value.")
        elif option.choices is not None and answer not in option.choices:
            prntr("Please select an option from the list.")
        else:
            try:
                return option.convert(answer)
            except ValueError:
                prntr(f"Could not read {answer!r} as {getattr(option.convert, '__name__', 'a value')}.")


def check_message(mess: str) -> bytes:
    """Parse message for path-notice, reading the file as raw bytes."""
    if mess.startswith("P:"):
        with open(mess[2:], "rb") as f:
            return f.read()
    return mess.encode("utf-8")


def main(argv: list[str] | None = None):
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = build_parser().parse_args(argv)
    interactive = not args.non_interactive
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    say = print if interactive else (lambda text: None)

    say("Welcome to mprsa!\n")
    if not args.subcommand:
        args.subcommand = ask("subcommand", interactive, args.advanced)
    for name in REQUIRES[args.subcommand]:
        if getattr(args, name, None) is None:
            setattr(args, name, ask(name, interactive, args.advanced))
        else:
            say(f"{name}: {getattr(args, name)}")
    say("\nInput Complete! Executing...")
    size = int(args.keysize)
    match args.subcommand:
        case "keygen":
            pair = keygen.generate_key_pair(size, args.trials)
            for name, value in pair._asdict().items():
                print(f"{name} = {value}")
        case "roundtrip":
            text = check_message(args.message)
            report, totals = benchmark.run_encryption(text, size, benchmark.BenchmarkTotals(), args.trials)
            say("Encrypted Text:")
            print(" ".join(str(block) for block in report.ciphertext))
            say("Decrypted Text:")
            print(report.output.decode("utf-8", errors="replace"))
            print(f"Time for key generation: {report.key_generation:.3f}s")
            print(f"Time for encryption: {report.encryption:.3f}s")
            print(f"Time for decryption: {report.decryption:.3f}s")
            print(f"Pack/Unpack time: {report.packing:.3f}s")
            print(f"Processed: {totals.throughput():.1f} bytes per second")
        case "benchmark":
            if args.runs < 1:
                raise ValueError("At least one benchmark run is required.")
            timings = benchmark.benchmark_key_generation(size, args.runs, args.trials)
            print(f"Bits = {size}")
            print(f"Average Time = {sum(timings) / len(timings):.3f}s")
    say("Thank you for using mprsa!")
    say("Goodbye!")


if __name__ == "__main__":
    main()
