"""
Unit Tests for schema model configuration
"""
import importlib
import warnings
import pytest
from pydantic.warnings import PydanticDeprecatedSince20

from portal.models import Skill
from portal.schemas.dashboard import DashboardSkill, DashboardStudent
from portal.schemas.catalog import SkillBrief

SCHEMA_MODULES = [
    'portal.schemas.common',
    'portal.schemas.session',
    'portal.schemas.auth',
    'portal.schemas.catalog',
    'portal.schemas.student',
    'portal.schemas.job',
    'portal.schemas.task',
    'portal.schemas.certificate',
    'portal.schemas.admin',
    'portal.schemas.dashboard',
]


class TestSchemaConfig:
    """Response schemas read ORM objects without deprecated configuration"""

    @pytest.mark.parametrize('module_name', SCHEMA_MODULES)
    def test_defines_without_deprecation_warnings(self, module_name):
        module = importlib.import_module(module_name)

        with warnings.catch_warnings():
            warnings.simplefilter('error', PydanticDeprecatedSince20)
            importlib.reload(module)

    def test_reads_from_attributes(self):
        skill = Skill(id='skill-1', name='Python', icon='py')

        assert SkillBrief.model_validate(skill).name == 'Python'
        assert SkillBrief.model_config['from_attributes'] is True
        assert DashboardStudent.model_config['from_attributes'] is True
        assert DashboardSkill.model_config['from_attributes'] is True
