from io import StringIO

import pytest

from goa_ecopath.config import EcopathConfigParser, get_config


def test_default_config():
    config = get_config()
    assert config.getexpression('ecopath_models', 'model_codes') == \
        {'WGOA': [610, 620, 630], 'EGOA': [640, 650]}
    assert config.getfloat('bathymetry', 'min_elevation') == -1000.
    assert config.getfloat('bathymetry', 'max_elevation') == 0.
    assert config.getoptional('statistical_areas', 'duplicate_policy') is None
    assert config.getoptional('roms', 'max_depth', dtype=float) is None
    assert config.getoptional('roms', 'no_such_option') is None
    assert 'temp' in config.getexpression('roms', 'averaged_variables')
    assert 'Iron' in config.getexpression('roms', 'integrated_variables')


def test_user_config_takes_precedence(tmp_path):
    user = tmp_path / 'user.cfg'
    user.write_text('[shelf]\nselection = coastal\n')

    config = EcopathConfigParser()
    config.add_user_config(str(user))
    # added after the user config but still overridden by it
    config.add_from_package('goa_ecopath', 'default.cfg')

    assert config.get('shelf', 'selection') == 'coastal'
    assert config.getfloat('shelf', 'ambiguity_ratio') == 0.5


def test_set_and_write():
    config = get_config()
    config.set('roms', 'max_depth', '200.0', user=True)
    config.set('bathymetry', 'min_elevation', '-500.0')
    assert config.getoptional('roms', 'max_depth', dtype=float) == 200.
    assert config.getfloat('bathymetry', 'min_elevation') == -500.

    fp = StringIO()
    config.write(fp)
    text = fp.getvalue()
    assert '[roms]' in text
    assert 'max_depth = 200.0' in text
    assert 'test_config.py' in text


def test_set_user_overrides_user_config(tmp_path):
    user = tmp_path / 'user.cfg'
    user.write_text('[output]\ndirectory = masks_from_file\n')
    config = get_config([str(user)])
    config.set('output', 'directory', 'masks_from_flag', user=True)
    assert config.get('output', 'directory') == 'masks_from_flag'


def test_missing_config_file(tmp_path):
    config = EcopathConfigParser()
    with pytest.raises(FileNotFoundError):
        config.add_user_config(str(tmp_path / 'missing.cfg'))
