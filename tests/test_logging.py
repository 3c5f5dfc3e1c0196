import logging

from goa_ecopath.logging import LoggingContext


def test_logging_context_to_file(tmp_path):
    log_filename = str(tmp_path / 'build.log')
    with LoggingContext('test_logging_context_to_file',
                        log_filename=log_filename) as logger:
        logger.info('Reading statistical areas...')
        logger.warning('Shelf selection is ambiguous')
        print('printed output')

    with open(log_filename) as fp:
        text = fp.read()
    assert 'Reading statistical areas...\n' in text
    assert 'WARNING: Shelf selection is ambiguous' in text
    assert 'printed output' in text
    assert logging.getLogger('test_logging_context_to_file').handlers == []


def test_logging_context_existing_logger():
    existing = logging.getLogger('test_logging_context_existing_logger')
    with LoggingContext('unused', logger=existing) as logger:
        assert logger is existing
