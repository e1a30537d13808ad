JIRA = "jira"
PROJECT_TYPE = "Project"
FIELD_CONTEXT_TYPE_NAME = "CustomFieldContext"
PROJECT_CONTEXTS_FIELD = "fieldContexts"
