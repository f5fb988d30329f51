import pytest

from reactornet.inet_address import InetAddress


def test_any_address_with_port():
    address = InetAddress(9090)
    assert address.to_ip() == "0.0.0.0"
    assert address.to_port() == 9090
    assert address.to_ip_port() == "0.0.0.0:9090"


def test_default_port():
    address = InetAddress()
    assert address.to_port() == 8888
    assert address.to_ip() == "0.0.0.0"


def test_explicit_ip():
    address = InetAddress(8080, "127.0.0.1")
    assert address.to_ip_port() == "127.0.0.1:8080"
    assert str(address) == "127.0.0.1:8080"


def test_sockaddr_round_trip():
    address = InetAddress(5000, "10.1.2.3")
    assert address.sockaddr() == ("10.1.2.3", 5000)
    assert InetAddress.from_sockaddr(address.sockaddr()) == address


def test_from_sockaddr():
    address = InetAddress.from_sockaddr(("192.168.0.7", 4321))
    assert address.to_ip() == "192.168.0.7"
    assert address.to_port() == 4321


def test_invalid_ip_raises():
    with pytest.raises(ValueError):
        InetAddress(80, "not-an-address")


@pytest.mark.parametrize("port", [-1, 65536])
def test_port_out_of_range_raises(port):
    with pytest.raises(ValueError):
        InetAddress(port)