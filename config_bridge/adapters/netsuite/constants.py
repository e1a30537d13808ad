NETSUITE = "netsuite"
CUSTOM_LIST = "customlist"
ACCOUNT_SPECIFIC_VALUE = "[ACCOUNT_SPECIFIC_VALUE]"

# SDF custom object types deployed through SuiteCloud
CUSTOM_TYPES = frozenset({
    "addressForm",
    "advancedpdftemplate",
    "bankstatementparserplugin",
    "bundleinstallationscript",
    "center",
    "centercategory",
    "centerlink",
    "centertab",
    "clientscript",
    "crmcustomfield",
    "customrecordactionscript",
    "customrecordtype",
    "customsegment",
    "customtransactiontype",
    "customlist",
    "dataset",
    "emailcaptureplugin",
    "emailtemplate",
    "entitycustomfield",
    "entryForm",
    "itemcustomfield",
    "itemnumbercustomfield",
    "itemoptioncustomfield",
    "mapreducescript",
    "massupdatescript",
    "othercustomfield",
    "portlet",
    "publisheddashboard",
    "restlet",
    "role",
    "savedcsvimport",
    "savedsearch",
    "scheduledscript",
    "sdfinstallationscript",
    "sspapplication",
    "sublist",
    "subtab",
    "suitelet",
    "transactionForm",
    "transactionbodycustomfield",
    "transactioncolumncustomfield",
    "translationcollection",
    "usereventscript",
    "workbook",
    "workflow",
    "workflowactionscript",
})
