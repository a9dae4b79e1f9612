"""survey_server — FastAPI REST API for the survey runtime.

Serves active survey definitions to respondent clients and stores their
consent, answers and completion.
"""
