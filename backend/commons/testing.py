"""
Test scaffolding shared by the services' test suites.
"""

import random
import struct
from io import BytesIO

from PIL import Image

SPECIALITIES = (
    'cardiologie',
    'neurochirurgie',
    'dermatologie',
    'endocrinologie',
    'geriatrie',
    'gynecologie',
    'hematologie',
    'radiologie',
    'radiotherapie',
    'rhumatologie',
    'psychiatrie',
    'pneumologie',
    'pediatrie',
    'orthopedie',
    'ophtalmologie',
    'obstetrique',
    'oncologie',
    'odontologie',
    'neurologie',
    'hepatologie',
    'infectiologie',
    'neonatologie',
    'nephrologie',
    'chirurgie',
)


def random_specialities() -> list:
    """At least one medical speciality, in random order, without repeats."""
    length = random.randint(1, len(SPECIALITIES))
    return random.sample(SPECIALITIES, length)


def util_batch_test(user, test_function, params_ok, params_forbidden):
    """
    Run a permission check over several parameters.

    test_function(user, param) must return a response; it has to be 200 for
    every entry of params_ok and 403 for every entry of params_forbidden.

    Raises:
        TypeError: params_ok or params_forbidden is not a list/tuple
        AssertionError: a response has an unexpected status code
    """
    if not isinstance(params_ok, (list, tuple)) or not isinstance(params_forbidden, (list, tuple)):
        raise TypeError('"params_ok" and "params_forbidden" must be lists.')

    for param in params_ok:
        response = test_function(user, param)
        assert response.status_code == 200, (
            f"Expected 200 for {param!r}, got {response.status_code}"
        )

    for param in params_forbidden:
        response = test_function(user, param)
        assert response.status_code == 403, (
            f"Expected 403 for {param!r}, got {response.status_code}"
        )


def make_image_bytes(width, height, image_format='PNG', mode='RGB', noise=False):
    """
    Encode an image of the given size.

    With noise, pixels come from a seeded generator so the encoded data
    barely compresses and PNG output spans several IDAT chunks.
    """
    if noise:
        pixels = random.Random(width * height).randbytes(width * height * len(mode))
        image = Image.frombytes(mode, (width, height), pixels)
    else:
        image = Image.new(mode, (width, height), color='red')
    buffer = BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def corrupt_png_chunk(data: bytes, chunk_type: bytes = b'IDAT', occurrence: int = 1) -> bytes:
    """
    Overwrite the first type byte of a PNG chunk with a non-letter.

    occurrence counts matching chunks from 0. Raises ValueError when the
    stream holds fewer matching chunks.
    """
    data = bytearray(data)
    position, seen = 8, 0
    while position + 8 <= len(data):
        length = struct.unpack('>I', data[position:position + 4])[0]
        if data[position + 4:position + 8] == chunk_type:
            if seen == occurrence:
                data[position + 4] = 0xDA
                return bytes(data)
            seen += 1
        position += length + 12
    raise ValueError(f"No {chunk_type!r} chunk number {occurrence}")
