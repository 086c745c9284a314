"""Allow running as `python -m legal_forms`"""

from legal_forms.cli.main import app

if __name__ == "__main__":
    app()
