# -*- coding: utf-8 -*-
"""Resolution of a single survey into stations with local positions."""

from cavesurvey_lib.survey.models import ResolvedSurvey
from cavesurvey_lib.survey.models import Station
from cavesurvey_lib.survey.resolver import AliasTable
from cavesurvey_lib.survey.resolver import SurveyResolver
from cavesurvey_lib.survey.resolver import resolve_survey

__all__ = [
    "AliasTable",
    "ResolvedSurvey",
    "Station",
    "SurveyResolver",
    "resolve_survey",
]
