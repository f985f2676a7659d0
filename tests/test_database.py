import logging

from docextract.database import create_db_engine


def test_invalidated_pool_connection_is_logged(tmp_path, caplog):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'documents.db'}")
    caplog.set_level(logging.CRITICAL, logger="docextract.database")

    with engine.connect() as connection:
        connection.invalidate()

    engine.dispose()
    assert any(
        record.levelno == logging.CRITICAL and "invalidated" in record.getMessage()
        for record in caplog.records
    )
