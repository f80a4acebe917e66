"""Allow ``python -m n8n_backup``."""

from n8n_backup.cli.main import cli_main

if __name__ == "__main__":
    cli_main()
