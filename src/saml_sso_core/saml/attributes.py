"""SAML 2.0 status constants, attribute names and timestamp formatting."""

from datetime import datetime, timezone

STATUS_SUCCESS = "urn:oasis:names:tc:SAML:2.0:status:Success"

ISSUE_INSTANT_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# https://www.purdue.edu/apps/account/docs/Shibboleth/Shibboleth_information.jsp
# https://wiki.library.ucsf.edu/display/IAM/EDS+Attributes
SAML2_ATTRIBUTE_NAMES = {
    "urn:oid:0.9.2342.19200300.100.1.1": "uid",
    "urn:oid:0.9.2342.19200300.100.1.3": "mail",
    "urn:oid:2.16.840.1.113730.3.1.241": "displayName",
    "urn:oid:2.5.4.3": "cn",
    "urn:oid:2.5.4.4": "sn",
    "urn:oid:2.5.4.12": "title",
    "urn:oid:2.5.4.20": "phone",
    "urn:oid:2.5.4.42": "givenName",
    "urn:oid:2.5.6.8": "organizationalRole",
    "urn:oid:2.16.840.1.113730.3.1.3": "employeeNumber",
    "urn:oid:2.16.840.1.113730.3.1.4": "employeeType",
    "urn:oid:1.3.6.1.4.1.5923.1.1.1.1": "eduPersonAffiliation",
    "urn:oid:1.3.6.1.4.1.5923.1.1.1.2": "eduPersonNickname",
    "urn:oid:1.3.6.1.4.1.5923.1.1.1.6": "eduPersonPrincipalName",
    "urn:oid:1.3.6.1.4.1.5923.1.1.1.9": "eduPersonScopedAffiliation",
    "urn:oid:1.3.6.1.4.1.5923.1.1.1.10": "eduPersonTargetedID",
    "urn:oid:1.3.6.1.4.1.5923.1.6.1.1": "eduCourseOffering",
}


def is_saml_successful(status_uri: str) -> bool:
    """Return True only for the SAML success status URI."""
    return status_uri == STATUS_SUCCESS


def saml2_attr_to_name(attr_oid: str) -> str:
    """Map an attribute OID URN to its friendly name; unknown OIDs map to themselves."""
    return SAML2_ATTRIBUTE_NAMES.get(attr_oid, attr_oid)


def make_issue_instant(moment: datetime) -> str:
    """Format a datetime as a SAML xs:dateTime in UTC without milliseconds.

    Naive datetimes are taken to be UTC.

    Example:
        >>> make_issue_instant(datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
        '2024-01-02T03:04:05Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(ISSUE_INSTANT_FORMAT)
