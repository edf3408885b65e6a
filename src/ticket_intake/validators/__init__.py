from .criteria_validator import CriteriaValidator, LICENSE_PATTERN, STATE_PATTERN
