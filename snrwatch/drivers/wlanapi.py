"""Native Windows WLAN API signal source (ctypes binding to wlanapi.dll).

Reads RSSI from the BSS list rather than the per-interface signal quality:
the interface value is low-pass filtered by Windows and reacts slowly to
small position changes, while BSS entries carry the raw hardware RSSI.
"""

from __future__ import annotations

import ctypes
from contextlib import ExitStack
from ctypes import wintypes
from dataclasses import dataclass
from typing import List, Tuple

from snrwatch.dsp.estimation import estimate_snr, frequency_to_channel
from snrwatch.errors import ProviderUnavailable
from snrwatch.sampling.types import Sample, decode_ssid

try:  # pragma: no cover - Windows only
    _wlanapi = ctypes.WinDLL("wlanapi.dll")  # type: ignore[attr-defined]

    HAVE_WLANAPI = True
except (AttributeError, OSError):  # pragma: no cover - Windows only
    _wlanapi = None
    HAVE_WLANAPI = False

ERROR_SUCCESS = 0
WLAN_CLIENT_VERSION = 2
WLAN_INTF_OPCODE_CURRENT_CONNECTION = 7
DOT11_BSS_TYPE_INFRASTRUCTURE = 1
DOT11_SSID_MAX_LENGTH = 32


class GUID(ctypes.Structure):
    _fields_ = [
        ("Data1", wintypes.DWORD),
        ("Data2", wintypes.WORD),
        ("Data3", wintypes.WORD),
        ("Data4", ctypes.c_ubyte * 8),
    ]


class DOT11_SSID(ctypes.Structure):
    _fields_ = [
        ("uSSIDLength", wintypes.ULONG),
        ("ucSSID", ctypes.c_ubyte * DOT11_SSID_MAX_LENGTH),
    ]

    def raw(self) -> bytes:
        return bytes(self.ucSSID[: min(self.uSSIDLength, DOT11_SSID_MAX_LENGTH)])


class WLAN_INTERFACE_INFO(ctypes.Structure):
    _fields_ = [
        ("InterfaceGuid", GUID),
        ("strInterfaceDescription", ctypes.c_wchar * 256),
        ("isState", ctypes.c_uint),
    ]


class WLAN_INTERFACE_INFO_LIST(ctypes.Structure):
    _fields_ = [
        ("dwNumberOfItems", wintypes.DWORD),
        ("dwIndex", wintypes.DWORD),
        ("InterfaceInfo", WLAN_INTERFACE_INFO * 1),
    ]


class WLAN_ASSOCIATION_ATTRIBUTES(ctypes.Structure):
    _fields_ = [
        ("dot11Ssid", DOT11_SSID),
        ("dot11BssType", ctypes.c_uint),
        ("dot11Bssid", ctypes.c_ubyte * 6),
        ("dot11PhyType", ctypes.c_uint),
        ("uDot11PhyIndex", wintypes.ULONG),
        ("wlanSignalQuality", wintypes.ULONG),
        ("ulRxRate", wintypes.ULONG),
        ("ulTxRate", wintypes.ULONG),
    ]


class WLAN_SECURITY_ATTRIBUTES(ctypes.Structure):
    _fields_ = [
        ("bSecurityEnabled", wintypes.BOOL),
        ("bOneXEnabled", wintypes.BOOL),
        ("dot11AuthAlgorithm", ctypes.c_uint),
        ("dot11CipherAlgorithm", ctypes.c_uint),
    ]


class WLAN_CONNECTION_ATTRIBUTES(ctypes.Structure):
    _fields_ = [
        ("isState", ctypes.c_uint),
        ("wlanConnectionMode", ctypes.c_uint),
        ("strProfileName", ctypes.c_wchar * 256),
        ("wlanAssociationAttributes", WLAN_ASSOCIATION_ATTRIBUTES),
        ("wlanSecurityAttributes", WLAN_SECURITY_ATTRIBUTES),
    ]


class WLAN_RATE_SET(ctypes.Structure):
    _fields_ = [
        ("uRateSetLength", wintypes.ULONG),
        ("usRateSet", wintypes.USHORT * 126),
    ]


class WLAN_BSS_ENTRY(ctypes.Structure):
    _fields_ = [
        ("dot11Ssid", DOT11_SSID),
        ("uPhyId", wintypes.ULONG),
        ("dot11Bssid", ctypes.c_ubyte * 6),
        ("dot11BssType", ctypes.c_uint),
        ("dot11BssPhyType", ctypes.c_uint),
        ("lRssi", wintypes.LONG),
        ("uLinkQuality", wintypes.ULONG),
        ("bInRegDomain", wintypes.BOOLEAN),
        ("usBeaconPeriod", wintypes.USHORT),
        ("ullTimestamp", ctypes.c_ulonglong),
        ("ullHostTimestamp", ctypes.c_ulonglong),
        ("usCapabilityInformation", wintypes.USHORT),
        ("ulChCenterFrequency", wintypes.ULONG),
        ("wlanRateSet", WLAN_RATE_SET),
        ("ulIeOffset", wintypes.ULONG),
        ("ulIeSize", wintypes.ULONG),
    ]


class WLAN_BSS_LIST(ctypes.Structure):
    _fields_ = [
        ("dwTotalSize", wintypes.DWORD),
        ("dwNumberOfItems", wintypes.DWORD),
        ("wlanBssEntries", WLAN_BSS_ENTRY * 1),
    ]


class WlanError(OSError):
    pass


@dataclass(frozen=True)
class BssEntry:
    ssid: bytes
    rssi_dbm: int
    link_quality: int
    frequency_khz: int


def _array_at(head, entry_type, count: int):
    """View a variable-length trailing array that the struct declares with length 1."""
    return (entry_type * count).from_address(ctypes.addressof(head))


class WlanLibrary:
    """Thin wrapper over the wlanapi.dll calls used by WlanApiSource.

    The enumeration and query methods return the API-allocated pointer next to
    the decoded data; the caller owns the pointer and must hand it to
    :meth:`free_memory`.
    """

    def __init__(self, dll=None):
        self.dll = dll if dll is not None else _wlanapi
        if self.dll is None:
            raise RuntimeError("wlanapi.dll not available")

    @staticmethod
    def _check(status: int, call: str) -> None:
        if status != ERROR_SUCCESS:
            raise WlanError(f"{call} failed with status {status}")

    def open_handle(self) -> wintypes.HANDLE:
        negotiated = wintypes.DWORD()
        handle = wintypes.HANDLE()
        self._check(
            self.dll.WlanOpenHandle(WLAN_CLIENT_VERSION, None, ctypes.byref(negotiated), ctypes.byref(handle)),
            "WlanOpenHandle",
        )
        return handle

    def close_handle(self, handle) -> None:
        self.dll.WlanCloseHandle(handle, None)

    def free_memory(self, ptr) -> None:
        self.dll.WlanFreeMemory(ptr)

    def enum_interfaces(self, handle) -> Tuple[object, List[GUID]]:
        ptr = ctypes.POINTER(WLAN_INTERFACE_INFO_LIST)()
        self._check(self.dll.WlanEnumInterfaces(handle, None, ctypes.byref(ptr)), "WlanEnumInterfaces")
        info = ptr.contents
        items = _array_at(info.InterfaceInfo, WLAN_INTERFACE_INFO, info.dwNumberOfItems)
        return ptr, [GUID.from_buffer_copy(item.InterfaceGuid) for item in items]

    def query_current_ssid(self, handle, guid: GUID) -> Tuple[object, bytes]:
        size = wintypes.DWORD(ctypes.sizeof(WLAN_CONNECTION_ATTRIBUTES))
        ptr = ctypes.POINTER(WLAN_CONNECTION_ATTRIBUTES)()
        opcode_type = ctypes.c_uint()
        self._check(
            self.dll.WlanQueryInterface(
                handle,
                ctypes.byref(guid),
                WLAN_INTF_OPCODE_CURRENT_CONNECTION,
                None,
                ctypes.byref(size),
                ctypes.byref(ptr),
                ctypes.byref(opcode_type),
            ),
            "WlanQueryInterface",
        )
        return ptr, ptr.contents.wlanAssociationAttributes.dot11Ssid.raw()

    def bss_list(self, handle, guid: GUID) -> Tuple[object, List[BssEntry]]:
        ptr = ctypes.POINTER(WLAN_BSS_LIST)()
        self._check(
            self.dll.WlanGetNetworkBssList(
                handle,
                ctypes.byref(guid),
                None,
                DOT11_BSS_TYPE_INFRASTRUCTURE,
                False,
                None,
                ctypes.byref(ptr),
            ),
            "WlanGetNetworkBssList",
        )
        bss = ptr.contents
        entries = [
            BssEntry(
                ssid=entry.dot11Ssid.raw(),
                rssi_dbm=int(entry.lRssi),
                link_quality=int(entry.uLinkQuality),
                frequency_khz=int(entry.ulChCenterFrequency),
            )
            for entry in _array_at(bss.wlanBssEntries, WLAN_BSS_ENTRY, bss.dwNumberOfItems)
        ]
        return ptr, entries


class WlanApiSource:
    """Query the associated network's BSS entry through the native WLAN API.

    Handles and API buffers live only for the duration of one query() call
    and are released in reverse acquisition order on every exit path.
    """

    device = "BSS Accurate RSSI"
    note = "Using hardware-accurate RSSI from BSS entries"

    def __init__(self, library=None):
        self.lib = library if library is not None else WlanLibrary()

    def query(self) -> Sample:
        lib = self.lib
        try:
            with ExitStack() as stack:
                handle = lib.open_handle()
                stack.callback(lib.close_handle, handle)

                if_list, guids = lib.enum_interfaces(handle)
                stack.callback(lib.free_memory, if_list)
                if not guids:
                    raise ProviderUnavailable("no wireless interfaces")
                guid = guids[0]

                conn, current_ssid = lib.query_current_ssid(handle, guid)
                stack.callback(lib.free_memory, conn)

                bss, entries = lib.bss_list(handle, guid)
                stack.callback(lib.free_memory, bss)

                for entry in entries:
                    if entry.ssid == current_ssid:
                        return self._sample_from_entry(current_ssid, entry)
                raise ProviderUnavailable("associated network not present in BSS list")
        except WlanError as exc:
            raise ProviderUnavailable(str(exc)) from exc

    @staticmethod
    def _sample_from_entry(ssid: bytes, entry: BssEntry) -> Sample:
        snr, noise = estimate_snr(entry.link_quality, entry.rssi_dbm)
        return Sample(
            timestamp_ms=0,
            signal_strength_dbm=entry.rssi_dbm,
            link_quality=entry.link_quality,
            snr_db=snr,
            noise_floor_dbm=noise,
            ssid=decode_ssid(ssid),
            frequency_khz=entry.frequency_khz,
            channel=frequency_to_channel(entry.frequency_khz),
        )

    def probe(self) -> bool:
        """Return True when at least one wireless interface enumerates."""
        lib = self.lib
        try:
            with ExitStack() as stack:
                handle = lib.open_handle()
                stack.callback(lib.close_handle, handle)
                if_list, guids = lib.enum_interfaces(handle)
                stack.callback(lib.free_memory, if_list)
                return bool(guids)
        except WlanError:
            return False

    def close(self) -> None:
        pass
