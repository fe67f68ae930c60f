"""
Django application initialization.
"""

import os


def get_wsgi_application(config_path: str = None):
    """
    Get the Django WSGI application configured with our settings.

    Args:
        config_path: Path to config.yaml (optional)
    """
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tipjar.web.settings")

    # Note: os.environ requires strings, so convert Path objects
    if config_path:
        os.environ["TIPJAR_CONFIG_PATH"] = str(config_path)

    from django.core.wsgi import get_wsgi_application as django_wsgi

    return django_wsgi()


def run_server(host: str = "127.0.0.1", port: int = 8000, config_path: str = None):
    """
    Run the Django development server for the JSON API.

    Args:
        host: Host to bind to
        port: Port to listen on
        config_path: Path to config.yaml
    """
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tipjar.web.settings")

    if config_path:
        os.environ["TIPJAR_CONFIG_PATH"] = str(config_path)

    import django

    django.setup()

    from django.core.management import execute_from_command_line

    print(f"\n🌐 Starting tipjar API at http://{host}:{port}/api/")
    print(f"⚙️  Config: {os.environ.get('TIPJAR_CONFIG_PATH', 'config.yaml')}")
    print("\nPress Ctrl+C to stop.\n")

    execute_from_command_line(
        [
            "manage.py",
            "runserver",
            f"{host}:{port}",
            "--noreload",  # Disable auto-reload for simpler operation
        ]
    )
