# Code for a question the student did not attempt in an encoded answer matrix
MISSING_VALUE = -1

# Answer text recorded for an attempted but unanswered question
OMITTED_ANSWER = ""

# Placeholders when no variant carries exam identity
UNKNOWN_EXAM_ID = "unknown"
UNKNOWN_EXAM_TITLE = "Unknown Exam"
