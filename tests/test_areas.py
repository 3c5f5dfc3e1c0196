import pytest

from goa_ecopath.mask.areas import assign_model_labels, \
    filter_statistical_areas, find_duplicate_codes, get_model_codes, \
    read_statistical_areas, resolve_duplicate_codes

from .util import MODEL_CODES, make_statistical_areas


def _get_goa_areas():
    return filter_statistical_areas(
        make_statistical_areas(), get_model_codes(MODEL_CODES),
        code_field='REP_AREA', class_field='REGION', class_values=['GOA'])


def test_assign_model_labels():
    labels = assign_model_labels([610, 620, 630, 640, 650], MODEL_CODES)
    assert labels == ['WGOA', 'WGOA', 'WGOA', 'EGOA', 'EGOA']


def test_assign_model_labels_unknown_code():
    with pytest.raises(ValueError):
        assign_model_labels([610, 541], MODEL_CODES)


def test_get_model_codes():
    assert get_model_codes(MODEL_CODES) == [610, 620, 630, 640, 650]
    with pytest.raises(ValueError):
        get_model_codes({'WGOA': [610, 620], 'EGOA': [620, 640]})


def test_filter_statistical_areas():
    areas = _get_goa_areas()
    assert list(areas.REP_AREA) == [610, 620, 630, 640, 650, 650, 650]
    assert set(areas.REGION) == {'GOA'}


def test_filter_statistical_areas_empty():
    with pytest.raises(ValueError):
        filter_statistical_areas(make_statistical_areas(), [999])


def test_read_statistical_areas(tmp_path):
    filename = str(tmp_path / 'areas.shp')
    make_statistical_areas().to_file(filename)
    areas = read_statistical_areas(filename, [610, 650],
                                   code_field='REP_AREA')
    assert sorted(areas.REP_AREA) == [610, 650, 650, 650]


def test_find_duplicate_codes():
    assert find_duplicate_codes(_get_goa_areas(), 'REP_AREA') == [650]


def test_resolve_duplicate_codes_requires_policy():
    with pytest.raises(ValueError, match='duplicate_policy'):
        resolve_duplicate_codes(_get_goa_areas(), 'REP_AREA', policy=None)


def test_resolve_duplicate_codes_keep_all():
    areas = resolve_duplicate_codes(_get_goa_areas(), 'REP_AREA',
                                    policy='keep_all')
    assert len(areas) == 7


def test_resolve_duplicate_codes_keep_largest():
    areas = resolve_duplicate_codes(_get_goa_areas(), 'REP_AREA',
                                    policy='keep_largest')
    assert list(areas.REP_AREA) == [610, 620, 630, 640, 650]
    # the large 650 polygon reaching the coast is the one kept
    assert areas.geometry.iloc[4].bounds == (-144., 54., -140., 61.)


def test_resolve_duplicate_codes_no_duplicates():
    areas = _get_goa_areas()
    areas = areas[areas.REP_AREA != 650]
    # no decision is needed without duplicates
    assert len(resolve_duplicate_codes(areas, 'REP_AREA')) == 4


def test_resolve_duplicate_codes_unknown_policy():
    with pytest.raises(ValueError):
        resolve_duplicate_codes(_get_goa_areas(), 'REP_AREA',
                                policy='keep_first')
