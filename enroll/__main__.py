"""
Entry point for `enroll` and `python -m enroll`.

Registers a freshly started license server with the remote account service.
"""


def main():
    from .cli import cli

    cli(prog_name="enroll")


if __name__ == "__main__":
    main()
