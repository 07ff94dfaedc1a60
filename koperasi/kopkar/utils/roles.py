# -*- coding: utf-8 -*-
"""Role names (Level.level_name) and the approval step each role signs."""
from kopkar.models import ApprovalStep

KETUA = "ketua"
DIVISI_SIMPAN_PINJAM = "divisi_simpan_pinjam"
PENGAWAS = "pengawas"
BENDAHARA = "bendahara"
PAYROLL = "payroll"
SHOPKEEPER = "shopkeeper"
ANGGOTA = "anggota"

ALL_ROLES = (KETUA, DIVISI_SIMPAN_PINJAM, PENGAWAS, BENDAHARA, PAYROLL, SHOPKEEPER, ANGGOTA)

ADMIN_ROLES = (KETUA, DIVISI_SIMPAN_PINJAM)
APPROVER_ROLES = (KETUA, DIVISI_SIMPAN_PINJAM, PENGAWAS)
STAFF_ROLES = (KETUA, DIVISI_SIMPAN_PINJAM, PENGAWAS, BENDAHARA, PAYROLL)
PAYROLL_ROLES = (KETUA, PAYROLL, DIVISI_SIMPAN_PINJAM)

STEP_ROLE = {
    ApprovalStep.DIVISI_SIMPAN_PINJAM: DIVISI_SIMPAN_PINJAM,
    ApprovalStep.KETUA: KETUA,
    ApprovalStep.PENGAWAS: PENGAWAS,
}
ROLE_STEP = {role: step for step, role in STEP_ROLE.items()}

# suffix used in UNDER_REVIEW_<suffix> statuses
STEP_STATUS_SUFFIX = {
    ApprovalStep.DIVISI_SIMPAN_PINJAM: "DSP",
    ApprovalStep.KETUA: "KETUA",
    ApprovalStep.PENGAWAS: "PENGAWAS",
}
