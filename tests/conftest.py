import pytest

from wapwatch.db.session import create_db_engine, create_session_factory, init_db

# Пример строки nmcli -t -f ALL dev wifi list (18 полей, BSSID с экранированными ':')
WPA2_LINE = (
    r"AP[1]:MyWifi:4d795769666900000000000000000000:AA\:BB\:CC\:DD\:EE\:FF:Infra:6:2437 MHz:"
    r"130 Mbit/s:20 MHz:-45:▂▄▆_:WPA2:(none):pairwise_ccmp:wlan0:yes:*:"
    r"/org/freedesktop/NetworkManager/AccessPoint/1"
)
OPEN_LINE = (
    r"AP[2]:CoffeeShop:436f6666656553686f70:11\:22\:33\:44\:55\:66:Infra:11:2462 MHz:"
    r"54 Mbit/s:20 MHz:70:▂▄▆_::(none):(none):wlan0:no: :"
    r"/org/freedesktop/NetworkManager/AccessPoint/2"
)


@pytest.fixture
async def engine(tmp_path):
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'waps.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)
