"""
Pydantic models for the parts of the identity profile schema that we touch.

Every mutable attribute of a profile carries its own metadata block and its
own signature, so that the store can tell which publisher wrote it and when.
Fields we do not know about are ignored on the way in; we only ever publish
partial profiles.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PublisherAuthority(str, Enum):
    MOZILLIANSORG = "mozilliansorg"
    CIS = "cis"
    LDAP = "ldap"
    HRIS = "hris"
    ACCESS_PROVIDER = "access_provider"


class Classification(str, Enum):
    PUBLIC = "PUBLIC"
    MOZILLA_CONFIDENTIAL = "MOZILLA CONFIDENTIAL"
    WORKGROUP_CONFIDENTIAL = "WORKGROUP CONFIDENTIAL"
    WORKGROUP_CONFIDENTIAL_STAFF_ONLY = "WORKGROUP CONFIDENTIAL: STAFF ONLY"
    INDIVIDUAL_CONFIDENTIAL = "INDIVIDUAL CONFIDENTIAL"


class Publisher(BaseModel):
    alg: str = "EdDSA"
    typ: str = "JWS"
    name: PublisherAuthority = PublisherAuthority.CIS
    value: str = ""


class Signature(BaseModel):
    publisher: Publisher = Field(default_factory=Publisher)
    additional: list[Publisher] = Field(default_factory=list)


class Metadata(BaseModel):
    classification: Classification = Classification.PUBLIC
    created: str = ""
    last_modified: str = ""
    verified: bool = False
    display: str | None = None


class Attribute(BaseModel):
    """
    Base for all signed attributes.
    """

    model_config = ConfigDict(extra="ignore")

    metadata: Metadata = Field(default_factory=Metadata)
    signature: Signature = Field(default_factory=Signature)


class StandardAttributeString(Attribute):
    value: str | None = None


class StandardAttributeBoolean(Attribute):
    value: bool | None = None


class StandardAttributeValues(Attribute):
    # Per-value payloads are unused for groups and always None.
    values: dict[str, str | None] | None = None


class AccessInformation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mozilliansorg: StandardAttributeValues = Field(
        default_factory=StandardAttributeValues
    )
    ldap: StandardAttributeValues = Field(default_factory=StandardAttributeValues)
    hris: StandardAttributeValues = Field(default_factory=StandardAttributeValues)
    access_provider: StandardAttributeValues = Field(
        default_factory=StandardAttributeValues
    )


class Profile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: StandardAttributeString = Field(default_factory=StandardAttributeString)
    active: StandardAttributeBoolean = Field(default_factory=StandardAttributeBoolean)
    primary_email: StandardAttributeString = Field(
        default_factory=StandardAttributeString
    )
    primary_username: StandardAttributeString = Field(
        default_factory=StandardAttributeString
    )
    first_name: StandardAttributeString = Field(default_factory=StandardAttributeString)
    last_name: StandardAttributeString = Field(default_factory=StandardAttributeString)
    access_information: AccessInformation = Field(default_factory=AccessInformation)

    @classmethod
    def default(cls) -> "Profile":
        return cls()

    def to_json(self) -> dict[str, Any]:
        """
        Serialize for the profile store.
        """
        return self.model_dump(mode="json")
