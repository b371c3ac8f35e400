# spotconnect

Building blocks for a Spotify Connect speaker, in plain Python.

The package provides the protocol, cryptography and bookkeeping pieces a
Connect receiver is made of. It is a library: it has no command of its own.

## Modules

- `spotconnect.shannon` – `Shannon`, the Shannon stream cipher with MAC.
  Call `key` and `nonce` first; `encrypt`, `decrypt` and `stream` return new
  bytes, `maconly` only feeds the MAC, and `finish(size)` returns the first
  `size` bytes of the MAC.
- `spotconnect.connection` – `PlainConnection`, a TCP connection to an access
  point given as `host:port`, with `send_prefix_packet`, `recv_packet`,
  `read_block` and `write_block`. It can be used as a context manager. When a
  read or write times out, the optional `timeout_handler` is asked whether to
  give up; if it returns true, or none is set, `ConnectionLostError` is raised.
- `spotconnect.shannon_connection` – `ShannonConnection`, which wraps any
  object with `read_block`/`write_block` in send and receive ciphers
  (`wrap_connection`) and sends and receives `Packet` objects (`command`,
  `data`). Nonces advance after every packet. A MAC mismatch on receive is
  logged, not raised.
- `spotconnect.mercury_response` – `parse_mercury_response`, returning a
  `MercuryResponse` with `sequence_id`, `flags`, the raw encoded `header` and
  the payload `parts`. Truncated input raises `ValueError`.
- `spotconnect.keyexchange` – the handshake messages (`ClientHello`,
  `APResponseMessage`, `ClientResponsePlaintext`, `BuildInfo`, `FeatureSet`
  and the others), the `Product`, `Platform` and `Cryptosuite` enums, and a
  small protobuf wire codec: `encode_varint`, `decode_varint`,
  `Message.encode` and `Message.decode` (unknown fields are skipped).
- `spotconnect.login_blob` – `LoginBlob`, loading credentials from a zeroconf
  blob (`load_zeroconf`), from a username and password (`load_user_pass`) or
  from stored JSON (`load_json`), and writing them back with `to_json`.
- `spotconnect.audio_chunk` – `AudioChunk`, collecting encrypted data
  (`append_data`) and decrypting it with AES-CTR at the IV matching its start
  position (`decrypt`).
- `spotconnect.audio_chunk_manager` – `AudioChunkManager`, which registers
  chunks (positions in 4-byte words), queues incoming data with
  `handle_chunk_data` and dispatches it to the matching chunk on a worker
  thread started by `start`. Header packets set a chunk's
  `header_file_size`, footer packets trigger decryption, `fail_all_chunks`
  and `close` mark pending chunks failed. Chunks are held weakly.
- `spotconnect.config` – `Config` (volume, device name, `AudioFormat`),
  loaded from and saved to JSON through `LocalFile` or any object with
  `read_file`/`write_file`. An empty or missing file resets the defaults;
  an unknown bitrate selects 320 kbit/s.
- `spotconnect.ap_resolve` – `first_ap_address` reads the first entry of
  `ap_list` from a resolver JSON document; `fetch_first_ap_address` asks the
  resolver over HTTP and returns `host:port`.
- `spotconnect.cli_args` – `parse_arguments` and `CommandLineArguments` for
  the `-u/--username`, `-p/--password`, `-b/--bitrate` (320, 160, 96) and
  `-h/--help` flags.
- `spotconnect.track_reference` – `TrackReference` and `base62_decode`, with
  `mercury_request_uri` giving the metadata URI of a track or episode.
- `spotconnect.utils` and `spotconnect.time_provider` – big-number helpers,
  URL decoding, hex formatting, and `TimeProvider`, a clock synced to the
  server's ping packets.

## Examples

Decoding a base62 track identifier:

```python
from spotconnect.track_reference import TrackReference, base62_decode

gid = base62_decode("6rqhFgbbKwnb9MLmUQDhG6")
print(TrackReference(gid=gid).mercury_request_uri())
```

Storing user credentials as JSON and loading them back:

```python
from spotconnect.login_blob import LoginBlob

password = "password"
blob = LoginBlob()
blob.load_user_pass("listener", password)
stored = blob.to_json()

restored = LoginBlob()
restored.load_json(stored)
```

Encrypting with Shannon and checking the MAC on the other side:

```python
from spotconnect.shannon import Shannon

sender, receiver = Shannon(), Shannon()
for cipher in (sender, receiver):
    cipher.key(b"\x00" * 32)
    cipher.nonce(b"\x00\x00\x00\x00")

sealed = sender.encrypt(b"hello")
assert receiver.decrypt(sealed) == b"hello"
assert sender.finish(4) == receiver.finish(4)
```

Parsing command-line flags:

```python
from spotconnect.cli_args import parse_arguments

password = "password"
args = parse_arguments(["-u", "listener", "-p", password, "-b", "160"])
```

Giving only one of username and password, an unknown flag, a flag without
its value, or an unsupported bitrate raises `ValueError`.

## What the package does not do

- It does not play audio: there is no Ogg Vorbis decoding, no audio output
  and no volume control of a sound device.
- It does not run a session end to end: there is no Diffie-Hellman login
  handshake, no Mercury request manager, no remote-control (playback state)
  handling and no track metadata lookup.
- It does not announce itself on the network: there is no zeroconf
  discovery service and no HTTP endpoint for adding a user.
- It has no command to run.

## Requirements

Python 3.10 or later and the `cryptography` distribution.