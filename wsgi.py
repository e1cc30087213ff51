"""
WSGI entry point for gunicorn (`gunicorn wsgi:app`).
"""
from profile_directory import create_app

app = create_app()

if __name__ == '__main__':
    import os
    app.run(host='0.0.0.0', port=int(os.getenv('PORT', 5000)))
