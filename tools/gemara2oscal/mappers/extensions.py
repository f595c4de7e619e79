"""
OSCAL extension vocabulary

Namespace and property names stamped on generated properties. Downstream
consumers (compliance-trestle, compliance-to-policy) read these names, so
they must not change.
"""

TRESTLE_NAMESPACE = "https://oscal-compass.github.io/compliance-trestle/schemas/oscal"

# Component definition rule sets
RULE_ID_PROP = "Rule_Id"
RULE_DESCRIPTION_PROP = "Rule_Description"
CHECK_ID_PROP = "Check_Id"
CHECK_DESCRIPTION_PROP = "Check_Description"
PARAMETER_ID_PROP = "Parameter_Id"
PARAMETER_DESCRIPTION_PROP = "Parameter_Description"
PARAMETER_DEFAULT_PROP = "Parameter_Value_Alternatives"
FRAMEWORK_PROP = "Framework_Short_Name"

# Assessment results observations
ASSESSMENT_RULE_ID_PROP = "assessment-rule-id"
ASSESSMENT_CHECK_ID_PROP = "assessment-check-id"
RESULT_PROP = "result"
REASON_PROP = "reason"
STEPS_EXECUTED_PROP = "steps-executed"

# Back-matter resources
RESOURCE_ID_PROP = "id"


def get_trestle_prop(name, props):
    """Return the first property with the given name in the trestle namespace"""
    for prop in props or []:
        if prop.get("name") == name and prop.get("ns") == TRESTLE_NAMESPACE:
            return prop
    return None
