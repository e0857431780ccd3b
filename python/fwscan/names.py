"""
Names for netlist archive entries.

IDs follow the netlist region identifiers used by the nvgpu driver
(gr_ctx_gk20a.h). Entries with IDs outside this table are named unk<id>.
"""

from types import MappingProxyType

SECTION_NAMES = MappingProxyType(
    {
        0: "fecs_data",
        1: "fecs_inst",
        2: "gpccs_data",
        3: "gpccs_inst",
        4: "sw_bundle_init",
        5: "sw_ctx",
        6: "sw_nonctx",
        7: "sw_method_init",
        8: "ctxreg_sys",
        9: "ctxreg_gpc",
        10: "ctxreg_tpc",
        11: "ctxreg_zcull_gpc",
        12: "ctxreg_pm_sys",
        13: "ctxreg_pm_gpc",
        14: "ctxreg_pm_tpc",
        15: "majorv",
        16: "buffer_size",
        17: "ctxsw_reg_base_index",
        18: "netlist_num",
        19: "ctxreg_ppc",
        20: "ctxreg_pmppc",
        21: "nvperf_ctxreg_sys",
        22: "nvperf_fbp_ctxregs",
        23: "nvperf_ctxreg_gpc",
        24: "nvperf_fbp_router",
        25: "nvperf_gpc_router",
        26: "ctxreg_pmltc",
        27: "ctxreg_pmfbpa",
        28: "swveidbundleinit",
        29: "nvperf_sys_router",
        30: "nvperf_pma",
        31: "ctxreg_pmrop",
        32: "ctxreg_pmucgpc",
        33: "ctxreg_etpc",
        34: "sw_bundle64_init",
        35: "nvperf_pmcau",
    }
)


def section_name(section_id: int) -> str:
    """Return the known name for an entry ID, or unk<id>."""
    return SECTION_NAMES.get(section_id, f"unk{section_id}")
