from typing import Literal

ApiType = Literal["wasi-http", "proxy-wasm"]
