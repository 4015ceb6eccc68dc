# vmediaserver

vmediaserver is a library of the pieces needed to serve a local removable
drive or a disk image file to a remote management controller as a Network
Block Device (NBD): the NBD wire format, the server's command-line options,
sector-level disk access, the HTTP requests of the login exchange, drive
discovery and a scan for live controllers on the network.

## Installing

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Modules

### `vmediaserver.protocol`

The NBD wire format and its constants (`REQUEST_MAGIC`, `REPLY_MAGIC`,
`OPT_EXPORT_NAME`, `REP_ERR_UNSUP`, `FLAG_HAS_FLAGS` and the rest).

- `Command`: the request types `READ`, `WRITE`, `DISC`, `FLUSH`, `TRIM`.
- `Request`: a 28-byte transmission request; `Request.unpack(data)` decodes
  it, `pack()` encodes it, and `command` gives the type without its flag bits.
- `Reply`: a simple reply carrying a handle and an error; `pack()` encodes it.
- `check_length(request, export_size)` raises `RequestError` unless the
  length is a non-zero multiple of 512 bytes, no larger than 1 MiB, does not
  overflow 64 bits and lies inside the export.
- `option_reply(opt, reply_type, data)` builds a fixed-newstyle option reply.
- `map_windows_error(code)` maps a Windows system error code to the errno
  sent to the client (`EINVAL` when the code is not known).
- `htonll(value)` and `ntohll(value)` convert 64-bit integers between host
  and network byte order.

### `vmediaserver.options`

`parse_args(argv)` reads the server arguments (without the program name) into
a `ServerOptions`. Values are attached to their option:

- `-fPATH`: the file or volume to serve
- `-cADDRESS`: the address of the controller
- `-pPORT`: the controller's port
- `-w`: allow writing
- `-d`: debug messages
- `-q`: be quiet
- `-h`: raises `UsageError`

Unknown or unsupported options also raise `UsageError`. `usage(prog)` returns
the help text, and `ServerOptions.websocket_url` gives
`wss://ADDRESS:PORT/vmws`.

### `vmediaserver.disk`

- `read_sectors(handle, start_sector, num_sectors, sector_size)` reads whole
  sectors from a binary file object, padding a short read with zero bytes.
- `write_sectors(handle, data, start_sector, num_sectors, sector_size)`
  writes whole sectors and returns the number of bytes written.
- `file_size_in_sectors(size, sector_size)`, `space_available(location,
  space_needed)`, `export_size(path)` and `slashify(name)`.

Failures are raised as `DiskError`.

### `vmediaserver.http`

`build_get(host, path, sid)`, `build_post(host, path, body)` and
`login_body(user, password)` build the raw HTTP requests of the login
exchange. `parse_response_headers(lines)` returns a `ResponseInfo` with the
session cookie, the content length and whether a body follows.

### `vmediaserver.drives`

`list_removable_drives()` lists labels such as `[E:\]` for the removable
drives reported by the system. `drives_from_mask`, `first_drive_from_mask`,
`device_label` and `volume_path` convert between drive masks, letters, labels
and volume paths. `DriveList` keeps the list current: `arrive(mask)` adds a
drive, `remove(mask)` drops it.

### `vmediaserver.scan`

- `next_ip(address, step)` and `ip_range(start, end)` walk IPv4 addresses.
- `port_open(ip, port, timeout)` tries a TCP connection.
- `scan_hosts(start, end, port, timeout)` returns the hosts in a range with
  the port open, each with its offset from the start.
- `export_choices(device_available, file_selected)` lists the export types
  that can be offered, and `server_arguments(export_path, ip, port)` builds
  the argument vector for one export.

### `vmediaserver.elapsed`

`format_progress(elapsed_ms, progress, total)` renders elapsed and estimated
total time, such as `00:05/00:20 `. `ElapsedTimer` keeps that text up to date
with `start()`, `stop()`, `ms()` and `update(progress, total)`.

## What the package does not do

The package has no command to run and does not itself connect to a
controller: it does not log in over HTTPS, open the websocket, run the NBD
handshake or serve requests from an open export. It supplies the formats,
checks and helpers those steps are built from.