MICROSOFT_SECURITY = "microsoft_security"

APPLICATION_TYPE_NAME = "EntraApplication"
SERVICE_PRINCIPAL_TYPE_NAME = "EntraServicePrincipal"
GROUP_TYPE_NAME = "EntraGroup"

ON_PREMISES_SYNC_ENABLED_FIELD = "onPremisesSyncEnabled"
