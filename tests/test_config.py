from playful_environment.config import FeatureFlags, ServiceSettings


def test_feature_flag_defaults():
    flags = FeatureFlags.from_environment({})
    assert flags == FeatureFlags()
    assert flags.auto_description_enabled
    assert flags.image_generation_enabled
    assert not flags.inpainting_enabled


def test_feature_flags_from_environment():
    flags = FeatureFlags.from_environment({
        'PLAYFUL_INPAINTING': 'yes',
        'PLAYFUL_AUTO_DESCRIPTION': '0',
        'PLAYFUL_IMAGE_GENERATION': ' ',
    })
    assert flags.inpainting_enabled
    assert not flags.auto_description_enabled
    assert flags.image_generation_enabled


def test_service_settings_from_environment():
    settings = ServiceSettings.from_environment({
        'OPENAI_API_KEY': 'sk',
        'GEMINI_IMAGE_MODEL': 'image-model',
        'AIRTABLE_TABLE_NAME': 'Interventions',
        'AIRTABLE_KEYWORD_FIELDS': 'Focus, Tags,,',
    })
    assert settings.openai_api_key == 'sk'
    assert settings.gemini_api_key == ''
    assert settings.gemini_image_model == 'image-model'
    assert settings.gemini_vision_model == ServiceSettings.gemini_vision_model
    assert settings.airtable_table_id == 'Interventions'
    assert settings.airtable_keyword_fields == ['Focus', 'Tags']
    assert settings.airtable_location_fields == ['Location', 'Region', 'Country']
