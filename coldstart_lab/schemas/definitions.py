"""
Target schema definitions for structured-output benchmarking.

Defines three object shapes of increasing difficulty for the model:
1. Wide - many flat top-level fields
2. Complex - moderate nesting with arrays of objects
3. Super complex - deep nesting, many enums and arrays
"""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SchemaModel(BaseModel):
    """Base for all target schemas; serializes with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass(frozen=True)
class DescribedSchema:
    """A target schema together with the label used for grouping."""

    key: str
    name: str
    model: type[BaseModel]

    def json_schema(self) -> dict:
        """JSON schema document sent to the generation service."""
        return self.model.model_json_schema()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "name": self.name,
            "model": self.model.__name__,
            "fields": len(self.model.model_fields),
        }


# ============================================================================
# Wide schema
# ============================================================================

class SocialMedia(SchemaModel):
    pass


class WideProfile(SchemaModel):
    id: int
    name: str
    email: str
    age: int
    gender: Literal["male", "female", "other"]
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str
    occupation: str
    company: str
    salary: float
    is_employed: bool
    start_date_time: str
    department: str
    skills: list[str]
    education: str
    marital_status: str
    hobbies: list[str]
    favorite_color: str
    website: str
    social_media: SocialMedia
    languages: list[str]
    has_car: bool
    height: float
    weight: float
    achievements: list[str]


# ============================================================================
# Complex schema
# ============================================================================

class PostalAddress(SchemaModel):
    street: str
    city: str
    country: str
    postal_code: str


class Contact(SchemaModel):
    email: str
    phone: str
    address: PostalAddress


class PersonalInfo(SchemaModel):
    age: int
    contact: Contact


class Experience(SchemaModel):
    company: str
    position: str
    start_date_time: str
    end_date_time: str
    achievements: list[str]


class Skill(SchemaModel):
    name: str
    level: Literal["beginner", "intermediate", "expert"]


class ProfessionalInfo(SchemaModel):
    occupation: str
    experience: list[Experience]
    skills: list[Skill]


class Details(SchemaModel):
    personal_info: PersonalInfo
    professional_info: ProfessionalInfo


class Hobby(SchemaModel):
    name: str
    frequency: str
    equipment: list[str]


class Preferences(SchemaModel):
    favorite_colors: list[str]
    hobbies: list[Hobby]


class Metadata(SchemaModel):
    last_updated: str
    version: str
    data_source: str


class ComplexProfile(SchemaModel):
    id: int
    name: str
    details: Details
    preferences: Preferences
    metadata: Metadata


# ============================================================================
# Super complex schema
# ============================================================================

class GeoAddress(SchemaModel):
    street: str
    city: str
    state: str
    country: str
    postal_code: str
    latitude: float
    longitude: float


class FullContact(SchemaModel):
    email: str
    phone: str
    alternative_phone: str
    address: GeoAddress


class FullPersonalInfo(SchemaModel):
    age: int
    date_of_birth: str
    nationality: str
    marital_status: Literal["single", "married", "divorced", "widowed"]
    contact: FullContact


class Education(SchemaModel):
    institution: str
    degree: str
    field_of_study: str
    graduation_year: int
    gpa: float


class Certification(SchemaModel):
    name: str
    issuing_organization: str
    date_obtained: str
    expiration_date: str


class Position(SchemaModel):
    company: str
    position: str
    start_date: str
    end_date: str
    is_current: bool
    responsibilities: list[str]
    skills: list[str]
    reports_to: str


class RatedSkill(SchemaModel):
    name: str
    category: str
    level: Literal["beginner", "intermediate", "advanced", "expert"]
    years_of_experience: float


class Language(SchemaModel):
    language: str
    proficiency: Literal["basic", "conversational", "fluent", "native"]
    certifications: list[str]


class FullProfessionalInfo(SchemaModel):
    occupation: str
    current_employer: str
    years_of_experience: int
    education: list[Education]
    certifications: list[Certification]
    experience: list[Position]
    skills: list[RatedSkill]
    languages: list[Language]


class FullDetails(SchemaModel):
    personal_info: FullPersonalInfo
    professional_info: FullProfessionalInfo


class DetailedHobby(SchemaModel):
    name: str
    category: str
    frequency: str
    years_of_experience: float
    related_skills: list[str]


class TravelPreferences(SchemaModel):
    accommodation_type: Literal["hotel", "hostel", "airbnb", "camping"]
    budget_per_day: float
    preferred_transportation: list[str]


class WorkPreferences(SchemaModel):
    preferred_work_environment: Literal["office", "remote", "hybrid"]
    desired_salary: float
    willing_to_relocate: bool
    preferred_industries: list[str]


class FullPreferences(SchemaModel):
    favorite_colors: list[str]
    hobbies: list[DetailedHobby]
    travel_preferences: TravelPreferences
    dietary_restrictions: list[str]
    work_preferences: WorkPreferences


class Asset(SchemaModel):
    type: str
    value: float
    purchase_date: str


class Liability(SchemaModel):
    type: str
    amount: float
    interest_rate: float


class FinancialInfo(SchemaModel):
    income: float
    expenses: float
    assets: list[Asset]
    liabilities: list[Liability]


class Medication(SchemaModel):
    name: str
    dosage: str
    frequency: str


class HealthInfo(SchemaModel):
    height: float
    weight: float
    medications: list[Medication]
    chronic_conditions: list[str]
    last_checkup: str


class RecordMetadata(SchemaModel):
    created_at: str
    last_updated: str
    data_source: str
    access_level: Literal["public", "private", "restricted"]
    tags: list[str]


class SuperComplexProfile(SchemaModel):
    id: int
    name: str
    details: FullDetails
    preferences: FullPreferences
    financial_info: FinancialInfo
    health_info: HealthInfo
    metadata: RecordMetadata


# ============================================================================
# Registry
# ============================================================================

COMPLEX_SCHEMA = DescribedSchema("complex", "Complex JSON Schema", ComplexProfile)
WIDE_SCHEMA = DescribedSchema("wide", "Wide JSON Schema", WideProfile)
SUPER_COMPLEX_SCHEMA = DescribedSchema("super-complex", "Super Complex JSON Schema", SuperComplexProfile)

ALL_SCHEMAS = [
    COMPLEX_SCHEMA,
    WIDE_SCHEMA,
    SUPER_COMPLEX_SCHEMA,
]


def get_schema(name: str) -> DescribedSchema:
    """Get a schema by its key or label (case-insensitive)."""
    for schema in ALL_SCHEMAS:
        if name.lower() in (schema.key, schema.name.lower()):
            return schema
    raise ValueError(f"Unknown schema: {name}")


def list_schemas() -> list[str]:
    """List all schema keys."""
    return [s.key for s in ALL_SCHEMAS]
