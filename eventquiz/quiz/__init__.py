"""
Quiz module for timed event quizzes.

Participants fetch a quiz without its answer key, run it client side one
question at a time and submit their answers once. Scoring happens here and
is never returned to the taker.
"""
from flask import Blueprint
from eventquiz.config import config

quiz_bp = Blueprint('quiz', __name__, url_prefix=config.QUIZ_URL_PREFIX)

from eventquiz.quiz import routes  # noqa: E402,F401
