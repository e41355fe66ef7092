import logging
import os
import threading

from pyquiz import create_app
from pyquiz.code_runner import RuntimeInitError, python_runtime

logger = logging.getLogger(__name__)

app = create_app()


def warm_up_runtime():
    try:
        python_runtime.ensure_ready()
    except RuntimeInitError as e:
        logger.warning("Python runtime not ready at startup: %s", e)


if __name__ == '__main__':
    threading.Thread(target=warm_up_runtime, daemon=True).start()
    app.run(
        host=os.getenv('HOST', '127.0.0.1'),
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )
