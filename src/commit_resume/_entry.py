"""Console entry point: run the CLI and always leave the cursor visible."""

from commit_resume.utils.output import show_cursor


def main():
    from commit_resume.cli.main import app

    try:
        app()
    finally:
        show_cursor()


if __name__ == "__main__":
    main()
