import click.testing
import pytest


@pytest.fixture(autouse=True)
def no_logging_setup(mocker):
    return mocker.patch('crkit._cogs.helpers.loggers.configure')


@pytest.fixture()
def runner():
    return click.testing.CliRunner()


@pytest.fixture()
def build_transport(mocker):
    return mocker.patch('crkit._core.intents.building.build_transport')


@pytest.fixture()
def client(mocker, build_transport):
    client = mocker.Mock()
    client.create = mocker.AsyncMock()
    client.get = mocker.AsyncMock()
    mocker.patch('crkit._core.clients.selecting.new_client', return_value=client)
    return client
