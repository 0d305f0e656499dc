from core.models import SystemSetting
from core.utils import get_local_today


def practice_settings(request):
    """Make practice settings available in all templates"""
    return {
        'PRACTICE_NAME': SystemSetting.get_practice_setting('practice_name'),
        'PRACTICE_TAGLINE': SystemSetting.get_practice_setting('practice_tagline'),
        'PRACTITIONER_NAME': SystemSetting.get_practice_setting('practitioner_name'),
        'CURRENT_YEAR': get_local_today().year,
    }
