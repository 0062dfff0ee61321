"""
Relationships Package
Relationship inference, naming and descriptor assembly over a schema graph
"""
from .inflection import (
    singular,
    plural,
    title_case,
    camel_case,
    snake_case,
    trim_suffix,
)
from .inference import (
    ToManyRelationship,
    TableRelationships,
    RelationshipInferenceEngine,
)
from .naming import (
    mk_function_name,
    receiver_name,
    assignment_expression,
    make_unique,
)
from .descriptors import (
    RelationshipToOneTexts,
    RelationshipToManyTexts,
    TableDescriptors,
    SchemaDescriptors,
    DescriptorAssembler,
    texts_from_foreign_key,
    texts_from_one_to_one_relationship,
    texts_from_relationship,
)

__all__ = [
    # Inflection
    "singular",
    "plural",
    "title_case",
    "camel_case",
    "snake_case",
    "trim_suffix",
    # Inference
    "ToManyRelationship",
    "TableRelationships",
    "RelationshipInferenceEngine",
    # Naming
    "mk_function_name",
    "receiver_name",
    "assignment_expression",
    "make_unique",
    # Descriptors
    "RelationshipToOneTexts",
    "RelationshipToManyTexts",
    "TableDescriptors",
    "SchemaDescriptors",
    "DescriptorAssembler",
    "texts_from_foreign_key",
    "texts_from_one_to_one_relationship",
    "texts_from_relationship",
]
