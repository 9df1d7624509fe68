"""
WSGI entry point.

Run with:
    gunicorn buskcats.wsgi:app

Or for local development:
    python -m buskcats.wsgi
"""

import logging
import os

from buskcats import create_app

logging.basicConfig(level=logging.INFO)

app = create_app()


if __name__ == '__main__':
    port = int(os.getenv('PORT', '5000'))
    print("\n" + "=" * 60)
    print("busk-cats subscription service")
    print("=" * 60)
    print(f"Subscribe endpoint:  http://localhost:{port}/subscribe")
    print(f"Admin list:          http://localhost:{port}/admin/list")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=port, debug=os.getenv('FLASK_DEBUG') == '1')
