# ==============================================================================
# WSGI Entry Point
# ==============================================================================
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
#   repo_root/
#   ├── wsgi.py          <- this file
#   ├── pyproject.toml
#   └── needibay/        <- package (main.py, services/, repositories/)
#
# Settings come from the environment or a .env file (see .env.example).
# ==============================================================================

from needibay.main import app

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
