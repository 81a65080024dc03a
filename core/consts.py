# -*- coding: utf-8 -*-

DEFAULT_WORKING_TIME = 25 * 60  # seconds
DEFAULT_RESTING_TIME = 5 * 60

ROOT_TASK_ID = 0
