__all__ = (
    'int32',
    'uint32',
    'float32',
    'ByteString',
    'LString',
    'Struct',
    'read_exact',
    'read_array',
    'write_array',
    )

import struct
from typing import get_type_hints

import numpy as np

from .errors import FormatError, StreamError

# Lengths and counts come from the file, so large reads are done in blocks
# and a bogus length fails at end of stream instead of allocating it all.
READ_BLOCK_SIZE = 1<<20

def read_exact(f, count):
    if count<=READ_BLOCK_SIZE:
        data = f.read(count)
    else:
        blocks = []
        remaining = count
        while remaining>0:
            block = f.read(min(remaining, READ_BLOCK_SIZE))
            if not block:
                break
            blocks.append(block)
            remaining -= len(block)
        data = b''.join(blocks)
    if len(data)!=count:
        raise StreamError(f"Unexpected end of stream: wanted {count} bytes, got {len(data)}")
    return data

class PrimitiveTypeMixin:
    _format_string = ''
    _name = ''
    _base = object
    @classmethod
    def size(cls):
        return struct.calcsize(cls._format_string)
    @classmethod
    def read(cls, f):
        values = struct.unpack(cls._format_string, read_exact(f, cls.size()))
        return cls(values[0])
    def write(self, f):
        try:
            data = struct.pack(self.__class__._format_string, self)
        except struct.error as e:
            raise FormatError(f"{self._name} cannot hold {self}: {e}") from e
        f.write(data)
    # Format as the base value, so f"{count}" gives "3", not "uint32(3)".
    def __str__(self):
        return self._base.__repr__(self)
    def __repr__(self):
        return f"{self._name}({self._base.__repr__(self)})"

def make_primitive_type(name_, base_type, format_string):
    class _PrimitiveType(PrimitiveTypeMixin, base_type):
        _format_string = format_string
        _name = name_
        _base = base_type
    _PrimitiveType.__name__ = name_
    return _PrimitiveType

# Everything on disk is little-endian.
int32 = make_primitive_type('int32', int, '<i')
uint32 = make_primitive_type('uint32', int, '<I')

class float32(make_primitive_type('float32', float, '<f')):
    # Round to single precision on construction, so that a value compares
    # equal to itself after a trip through a file.
    def __new__(cls, value=0.0):
        try:
            value = struct.unpack('<f', struct.pack('<f', value))[0]
        except (struct.error, OverflowError) as e:
            raise FormatError(f"float32 cannot hold {value!r}: {e}") from e
        return super().__new__(cls, value)

def ByteString(length):
    return make_primitive_type(f'ByteString({length})', bytes, f'{length}s')

class LString(str):
    """A uint32 byte count followed by that many bytes of UTF-8."""
    @classmethod
    def size(cls):
        raise TypeError("LString has no fixed size")
    @classmethod
    def read(cls, f):
        length = uint32.read(f)
        data = read_exact(f, length)
        try:
            return cls(data.decode('utf-8'))
        except UnicodeDecodeError as e:
            raise FormatError(f"String is not valid UTF-8: {data[:32]!r}") from e
    def write(self, f):
        data = self.encode('utf-8')
        uint32(len(data)).write(f)
        f.write(data)
    def __repr__(self):
        return f"LString({str.__repr__(self)})"

class Struct:
    """Base for fixed-layout records. The annotated fields, in declaration
    order, are the on-disk layout."""
    def __init__(self, values=None, **kwargs):
        if self.__class__==Struct:
            raise TypeError("Cannot instantiate Struct itself, only subclasses")
        hints = get_type_hints(self.__class__)
        if len(hints)==0:
            raise TypeError(f"{self.__class__.__name__} has no fields defined")
        if values is None:
            values = self.default_values()
        values = list(values)
        if len(values)!=len(hints):
            raise ValueError(f"Expected {len(hints)} values, got {len(values)}")
        unknown = set(kwargs)-set(hints)
        if unknown:
            raise TypeError(f"{self.__class__.__name__} has no fields {sorted(unknown)}")
        for (name, typeref), value in zip(hints.items(), values):
            setattr(self, name, typeref(kwargs.get(name, value)))

    @classmethod
    def default_values(cls):
        raise TypeError(f"{cls.__name__} has no default values; pass values explicitly")

    @classmethod
    def fields(cls):
        return tuple(get_type_hints(cls).keys())

    @classmethod
    def size(cls):
        size = 0
        hints = get_type_hints(cls)
        for name, typeref in hints.items():
            size += typeref.size()
        return size

    @classmethod
    def read(cls, f):
        hints = get_type_hints(cls)
        values = []
        for name, typeref in hints.items():
            values.append(typeref.read(f))
        return cls(values)

    def write(self, f):
        hints = get_type_hints(self.__class__)
        for name, typeref in hints.items():
            value = getattr(self, name)
            # Fields may have been reassigned with plain python values.
            if not isinstance(value, typeref):
                value = typeref(value)
            value.write(f)

    def __eq__(self, other):
        if self.__class__ is other.__class__:
            return all(getattr(self, name)==getattr(other, name)
                for name in self.fields())
        if isinstance(other, Struct):
            return NotImplemented
        # Plain sequences compare field by field: Vector3(...) == (x, y, z)
        try:
            other_values = list(other)
        except TypeError:
            return NotImplemented
        return [getattr(self, name) for name in self.fields()]==other_values

    def __repr__(self):
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.fields())
        return f"{self.__class__.__name__}({fields})"

#---------------------------------------------------------------------------#
# Bulk arrays

def read_array(f, dtype, count):
    """Read `count` items of `dtype` into a new, writeable numpy array."""
    dtype = np.dtype(dtype)
    if count==0:
        return np.empty(0, dtype=dtype)
    data = read_exact(f, count*dtype.itemsize)
    return np.frombuffer(data, dtype=dtype, count=count).copy()

def write_array(f, values, dtype):
    dtype = np.dtype(dtype)
    try:
        a = np.asarray(values)
    except (OverflowError, TypeError, ValueError) as e:
        raise FormatError(f"Cannot store values as {dtype}: {e}") from e
    if a.size:
        if not np.can_cast(a.dtype, dtype, casting='same_kind'):
            raise FormatError(f"Cannot store {a.dtype} values as {dtype}")
        if dtype.kind in 'iu':
            info = np.iinfo(dtype)
            lo, hi = int(a.min()), int(a.max())
            if lo<info.min or hi>info.max:
                raise FormatError(f"Values {lo}..{hi} do not fit in {dtype}")
        elif dtype.kind=='f':
            with np.errstate(over='ignore'):
                converted = a.astype(dtype)
            if not np.array_equal(np.isfinite(a), np.isfinite(converted)):
                raise FormatError(f"Values too large for {dtype}")
    a = np.ascontiguousarray(a, dtype=dtype)
    f.write(a.tobytes())
