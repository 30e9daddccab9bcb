import pytest
from pydantic import ValidationError

from restapi.core.common import drop_none, transform
from restapi.tools.http.models import ActionConfiguration, Property


class ActionRow:
    path = 'https://api.test/'
    http_method = 'GET'


def test_transform_returns_existing_instance():
    action = ActionConfiguration(path='https://api.test/')
    assert transform(ActionConfiguration, action) is action


def test_transform_from_mapping_and_attributes():
    assert transform(ActionConfiguration, {'path': 'p', 'httpMethod': 'GET'}).http_method == 'GET'
    assert transform(ActionConfiguration, ActionRow()).path == 'https://api.test/'


def test_transform_between_models():
    assert transform(Property, ActionConfiguration(path='x')).key is None


def test_transform_raises_validation_error():
    with pytest.raises(ValidationError):
        transform(ActionConfiguration, {'headers': 'nope'})


def test_drop_none():
    assert drop_none({'a': 1, 'b': None, 'c': 0}) == {'a': 1, 'c': 0}
