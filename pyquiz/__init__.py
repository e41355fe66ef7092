from flask import Flask
from flask_cors import CORS

from pyquiz.config import Config
from pyquiz.utils.logging_config import setup_logging


def create_app(test_config=None):
	app = Flask(__name__)
	app.config.from_object(Config)
	if test_config:
		app.config.update(test_config)

	setup_logging(app.config.get('LOG_LEVEL', 'INFO'))

	CORS(app, resources={r"/api/*": {"origins": "*"}})

	# Unknown profile names raise here
	from pyquiz.suspicion_detector import get_profile
	get_profile(app.config.get('SUSPICION_PROFILE'))

	# Initialize the main routes
	from pyquiz.routes import main
	app.register_blueprint(main)

	return app
