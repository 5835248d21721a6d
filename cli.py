import argparse
import subprocess

FILES_TO_CLEAN = ["math_solver", "tests", "cli.py"]


def clean():
    # Format all files
    subprocess.run(
        [
            "autoflake",
            "--remove-all-unused-imports",
            "--remove-unused-variables",
            "--recursive",
            *FILES_TO_CLEAN,
            "-i",
            "--exclude=__init__.py",
        ]
    )
    subprocess.run(["isort", *FILES_TO_CLEAN, "--profile", "black"])
    subprocess.run(["black", *FILES_TO_CLEAN])

    subprocess.run(["mypy", "math_solver", "cli.py"])


def test(real_apis: bool = False):
    command = ["pytest", "-m", "unit or integration" if real_apis else "unit"]
    if real_apis:
        command.append("--use-real-apis")
    subprocess.run(command)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("command", type=str, help="Command to run (clean, test)")
    parser.add_argument(
        "--use-real-apis",
        action="store_true",
        help="Also run integration tests against Gemini",
    )
    args = parser.parse_args()
    if args.command == "clean":
        clean()
    elif args.command == "test":
        test(args.use_real_apis)
    else:
        print("Invalid command")


if __name__ == "__main__":
    main()
