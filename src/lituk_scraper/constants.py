"""
Constants and configuration values for the Life in the UK quiz scraper.

This module centralizes site URLs, DOM selectors, timeouts and default paths
so the scraper components share a single definition of the site contract.
"""

# Site URLs
BASE_URL = "https://lifeintheuktests.co.uk/life-in-the-uk-test/"
LOGIN_URL = "https://lifeintheuktests.co.uk/login/"

# Quiz layout
QUESTIONS_PER_QUIZ = 24
QUIZ_NUMBER_MIN = 1
QUIZ_NUMBER_MAX = 45

# Quizzes 16-45 are members-only
MEMBERS_QUIZ_MIN = 16
MEMBERS_QUIZ_MAX = 45

# Quiz 1 opens on a "start" screen the automaton does not drive
UNSUPPORTED_QUIZZES = {1}

# Quiz used to probe whether a stored session is still logged in
SESSION_PROBE_QUIZ = 16

# Timeouts in milliseconds
TIMEOUTS = {
    'settle_delay': 500,
    'login_wait': 300000,
    'element_wait': 30000,
    'navigation': 60000,
}

# DOM selectors. Question-scoped selectors are relative to SELECTORS['question_item'].
SELECTORS = {
    'question_item': "div.theorypass_quiz > ol > li:nth-child({index})",
    'first_option': "div.theorypass_question > ul > li:nth-child(1) > label > span > div",
    'question_text': "div.theorypass_question > div > p",
    'option_text': "div.theorypass_question > ul > li > label > span > div > span:nth-child(2)",
    'correct_option_text': (
        "div.theorypass_question > ul > li.theorypass_answerCorrect"
        " > label > span > div > span:nth-child(2)"
    ),
    'correct_marker': "li.theorypass_answerCorrect",
    'tip_text': "div.theorypass_response > div.theorypass_incorrect > p",
    'check_button': "input[name='check']:not([style*='display: none;'])",
    'next_button': "input[name='next']",
}

# Anki export
ANKI_DECK_NAME = "Life in the UK"
ANKI_LINE_BREAK = "<br>"

# Scheduling
SCHEDULING_MODES = ('pool', 'batch')
JOB_ORDERS = ('lifo', 'fifo')

# File Paths and Names
DEFAULT_PATHS = {
    'config_file': 'config/settings.json',
    'cookies_file': 'credentials/cookies.json',
    'output_file': 'output/scraped_questions.json',
    'anki_file': 'output/anki_export.txt',
    'metrics_file': 'logs/run_metrics.json',
    'log_file': 'logs/combined.log',
    'error_log_file': 'logs/error.log',
}
