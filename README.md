# kbeclient

A client-side toolkit for the binary protocol of a KBEngine game server. It
encodes and decodes messages, models server entities on the client, builds
remote method calls and encrypts packets.

## Modules

- `kbeclient.stream.MemoryStream`: a little-endian byte buffer with a read
  cursor and a soft capacity (1460 bytes by default). It has `read_*` and
  `write_*` methods for 8/16/32/64-bit signed and unsigned integers, floats,
  doubles, NUL-terminated strings (`read_string`/`write_string`),
  length-prefixed bytes (`read_blob`/`write_blob`), length-prefixed UTF-8 text
  (`read_unicode`/`write_unicode`) and 2-, 3- and 4-float vectors. Reading past
  the end raises `EOFError`; writing an out-of-range value raises `ValueError`.
- `kbeclient.bundle`: `Message` describes a message (id, name, fixed length or
  `-1` for variable). `Bundle` writes messages into packets of limited size,
  starting a new packet when a value does not fit, and fills in the length
  field of variable-length messages. `Bundle.send(network)` sends every packet
  through an object with `valid()` and `send(data)` methods, raising
  `ConnectionError` if the interface is not valid, and then clears the bundle.
  `Bundle.packets()` returns the packets without sending them.
- `kbeclient.encryption.BlowfishFilter`: Blowfish encryption in which each
  plaintext block is XOR-ed with the previous one, and packets are framed as a
  uint16 length, a uint8 pad count and the encrypted data. `send` encrypts and
  hands the packet to a callable; `recv` reassembles incoming bytes, possibly
  split across calls, and passes each decrypted payload to a callable. Keys
  must be 4 to 56 bytes; with no key a random 16-byte key is made.
- `kbeclient.datatypes`: the entity-definition data types `IntType`,
  `FloatType`, `DoubleType`, `StringType`, `UnicodeType`, `VectorType`,
  `BlobType`, `ArrayType` and `FixedDictType`, each able to read a value from
  a stream, write one into a bundle, parse a default-value string and check a
  value. `builtin_types()` returns fresh instances of the standard types keyed
  by name (`INT8` … `UINT64`, `FLOAT`, `DOUBLE`, `STRING`, `VECTOR2`–`VECTOR4`,
  `PYTHON`, `UNICODE`, `ENTITYCALL`, `BLOB`).
- `kbeclient.custom_types`: the user-defined structures `AvatarData`,
  `AvatarInfos`, `AvatarInfosList`, `Bag` and `Examples` as dataclasses with
  `read(stream)` and `write(bundle)`, plus readers and writers for the
  `ENTITY_FORBID_COUNTER`, `ENTITYID_LIST` and anonymous int32 arrays.
- `kbeclient.entity`: `ClientContext` holds shared state (player id, space id,
  current server, entity definitions as `ScriptModule` objects, the network
  interface and event listeners); `fire(event, data)` calls the listeners.
  `Entity` is the base of game entities: `enter_world`, `leave_world`,
  `enter_space` and `leave_space` fire events such as `onEnterWorld`,
  `set_position` and `set_direction`. `EntityComponent` reads its state from
  a stream and updates its properties from their definitions.
- `kbeclient.entity_call`: `EntityCall` builds calls to an entity's base or
  cell methods and sends them; `AccountBaseCall`, `AvatarCellCall` and the
  component calls (`TestBaseCall`, `TestCellCall`, `TestNoBaseCellCall`) have
  one method per remote method. `make_entity_calls(context, entity_id,
  class_name)` returns the (base, cell) pair for a class.
- `kbeclient.account.AccountBase` and `kbeclient.avatar.AvatarBase`: abstract
  base classes to subclass for the Account and Avatar entities. They decode
  remote method calls and property updates into handler methods and
  `on_<property>_changed` hooks.
- `kbeclient.server_errors.ServerErrorDescrs`: the server's error codes,
  looked up with `error(error_id)` or `describe(error_id)`.
- `kbeclient.sdk_updater.ClientSDKUpdater`: collects SDK files the server
  sends in chunks (`SDKChunk`), writes them to a temporary directory and, after
  the last file, installs them over the SDK directory while keeping its
  `Source/KBEnginePlugins/Scripts` directory. `download_request` writes the
  import request into a bundle.

## Installation

```
pip install kbeclient
```

## Examples

Reading and writing a stream:

```python
from kbeclient.stream import MemoryStream

stream = MemoryStream()
stream.write_uint16(42)
stream.write_unicode("hello")

assert stream.read_uint16() == 42
assert stream.read_unicode() == "hello"
```

Building a message:

```python
from kbeclient.bundle import Bundle, Message

bundle = Bundle()
bundle.new_message(Message(id=1, name="Loginapp_hello"))
bundle.write_string("0.1.0")
bundle.fini(True)
packets = bundle.packets()  # list of bytes, ready to send
```

Encrypting and decrypting a packet:

```python
from kbeclient.encryption import BlowfishFilter

sender = BlowfishFilter(b"0123456789abcdef")
receiver = BlowfishFilter(b"0123456789abcdef")

wire = []
sender.send(lambda data: wire.append(data) or True, b"payload")

received = []
receiver.recv(received.append, wire[0])
assert received == [b"payload"]
```

Looking up a server error:

```python
from kbeclient.server_errors import ServerErrorDescrs

errors = ServerErrorDescrs()
print(errors.describe(4))  # SERVER_ERR_NAME_PASSWORD[...]
```

## What the package does not do

This is a protocol library, not a complete client. It opens no sockets and
has no login flow, event loop or message dispatcher:

- Sending goes through an object you supply with `valid()` and `send(data)`
  methods, set as `ClientContext.network` or passed to `Bundle.send`.
- The message descriptions that entity calls use must be put into
  `kbeclient.entity_call.MESSAGES` by the application, keyed by name
  (`Baseapp_onRemoteCallCellMethodFromClient`, `Entity_onRemoteMethodCall`).
- Entity definitions must be filled into `ClientContext.module_defs` as
  `ScriptModule` objects; the package does not fetch them from the server.
- Incoming messages must be routed to `on_remote_method_call` and
  `on_update_propertys` by the application.

## Running the tests

```
pip install "kbeclient[test]"
pytest
```