from .api import Api
from .associations import BelongsTo, HasOne, HasMany
from .collection import Collection
from .exceptions import PotionClientException, PathError, ParseError, AssociationUnknownError, UnknownAttribute, \
    ResourceInvalid, ValidationError
from .parallel import in_parallel
from .relation import Relation, scope
from .resource import Resource, JsonApiResource, custom_get, custom_post, custom_put, custom_patch, custom_delete
from . import fields, hooks, middleware, signals

__all__ = (
    'Api',
    'Resource',
    'JsonApiResource',
    'BelongsTo',
    'HasOne',
    'HasMany',
    'Collection',
    'Relation',
    'scope',
    'custom_get',
    'custom_post',
    'custom_put',
    'custom_patch',
    'custom_delete',
    'in_parallel',
    'fields',
    'hooks',
    'middleware',
    'signals',
    'PotionClientException',
    'PathError',
    'ParseError',
    'AssociationUnknownError',
    'UnknownAttribute',
    'ResourceInvalid',
    'ValidationError'
)
