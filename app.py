from __future__ import annotations
import streamlit as st
import plotly.graph_objects as go

from clineng_core.config import load_config, build_synchronizer
from clineng_core.errors import ErrorContext
from clineng_core.logging import setup_logging, get_logger
from clineng_core.offline import SyncStatus
from clineng_core.services import DashboardService, IntakeService
from clineng_core.state import EquipmentStatus

logger = get_logger(__name__)

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="ALVS Engineering & Medical",
    page_icon="🩺",
    layout="wide",
)


def _get_synchronizer():
    """Create the synchronizer once per browser session and run the first pull."""
    if "sync" not in st.session_state:
        config = load_config()
        setup_logging(config.log_level)
        sync = build_synchronizer(config)
        with st.spinner("Synchronizing with server..."):
            sync.start()
        st.session_state["sync"] = sync
    return st.session_state["sync"]


sync = _get_synchronizer()
intake = IntakeService(sync)
dashboard = DashboardService(sync.store)


# ============================================================================
# SIDEBAR - CONNECTION STATUS
# ============================================================================
with st.sidebar:
    st.markdown("### ALVS")
    st.caption("ENGINEERING & MEDICAL")

    status = sync.get_status_display()
    if sync.status == SyncStatus.SYNCED:
        st.success("🟢 Synced with server")
    else:
        st.warning("🟠 Offline - showing local data")

    if st.button("🔄 Resynchronize", use_container_width=True):
        result = intake.resynchronize()
        logger.info(f"Manual resynchronization finished: {result.data.value}")
        st.toast(f"Status: {result.data.value}")
        st.rerun()

    with st.expander("Sync details", expanded=False):
        st.json(status)


# =============================================================================
# MAIN TABS
# =============================================================================
tab_dashboard, tab_equipment, tab_customers, tab_suppliers = st.tabs([
    "📊 Dashboard",
    "🩺 Equipment",
    "🏥 Customers",
    "📦 Suppliers",
])


# =============================================================================
# TAB 1: DASHBOARD
# =============================================================================
with tab_dashboard:
    counts = dashboard.status_counts()

    kpi_cols = st.columns(4)
    kpi_cols[0].metric("Equipment", len(sync.store.equipment))
    kpi_cols[1].metric("Customers", len(sync.store.customers))
    kpi_cols[2].metric(
        "In maintenance",
        int(counts.loc[counts["status"] == EquipmentStatus.IN_PROGRESS.value, "count"].sum()),
    )
    kpi_cols[3].metric(
        "Awaiting service",
        int(counts.loc[counts["status"] == EquipmentStatus.PENDING.value, "count"].sum()),
    )

    col_chart, col_recent = st.columns([1, 2])

    with col_chart:
        st.markdown("#### Status breakdown")
        shown = counts[counts["count"] > 0]
        if shown.empty:
            st.info("No equipment registered yet.")
        else:
            fig = go.Figure(go.Pie(
                labels=shown["label"],
                values=shown["count"],
                marker=dict(colors=list(shown["color"])),
                hole=0.5,
            ))
            fig.update_layout(
                paper_bgcolor='rgba(0,0,0,0)',
                height=320,
                margin=dict(t=10, b=10, l=10, r=10),
            )
            st.plotly_chart(fig, use_container_width=True)

    with col_recent:
        st.markdown("#### Recent services")
        st.dataframe(dashboard.recent_services(limit=5), use_container_width=True, hide_index=True)


# =============================================================================
# TAB 2: EQUIPMENT
# =============================================================================
with tab_equipment:
    query = st.text_input("Search by name or code", key="equipment_query")
    matches = dashboard.search_equipment(query)
    st.dataframe(dashboard.equipment_frame(matches), use_container_width=True, hide_index=True)

    st.download_button(
        "📥 Download inventory CSV",
        data=dashboard.inventory_csv(),
        file_name="alvs_inventory.csv",
        mime="text/csv",
    )

    customers = sync.store.customers
    customer_options = {c.id: c.name for c in customers}

    with st.expander("➕ New equipment", expanded=False):
        with st.form("equipment_form", clear_on_submit=True):
            c1, c2 = st.columns(2)
            form = {
                "name": c1.text_input("Equipment name *"),
                "serialNumber": c2.text_input("Serial number *"),
                "brand": c1.text_input("Brand"),
                "model": c2.text_input("Model"),
                "manufacturer": c1.text_input("Manufacturer"),
                "customerId": c2.selectbox(
                    "Customer",
                    options=list(customer_options),
                    format_func=lambda cid: customer_options.get(cid, cid),
                ),
                "observations": st.text_area("Observations"),
            }
            if st.form_submit_button("Register equipment", type="primary"):
                result = intake.register_equipment(form)
                if result:
                    st.success(f"Equipment registered with code {result.data.code}")
                else:
                    logger.warning(f"register_equipment rejected [{result.error_code}]: {result.error}")
                    st.error(result.error)

    equipment_options = {e.id: f"{e.code} - {e.name}" for e in sync.store.equipment}
    if equipment_options:
        selected_id = st.selectbox(
            "Selected equipment",
            options=list(equipment_options),
            format_func=lambda eid: equipment_options[eid],
        )

        with st.expander("🔧 Record service", expanded=False):
            with st.form("service_form", clear_on_submit=True):
                form = {
                    "description": st.text_area("Procedures performed *"),
                    "serviceType": st.selectbox("Service type", ["Corrective", "Preventive", "Calibration", "Inspection"]),
                    "resolution": st.text_area("Resolution"),
                    "resolved": st.checkbox("Resolved"),
                    "status": st.selectbox(
                        "New status",
                        options=[s.value for s in EquipmentStatus],
                        format_func=lambda v: EquipmentStatus(v).label,
                    ),
                }
                if st.form_submit_button("Save service", type="primary"):
                    result = intake.record_service(selected_id, form)
                    if result:
                        st.success("Service recorded")
                    else:
                        logger.warning(f"record_service rejected [{result.error_code}]: {result.error}")
                        st.error(result.error)

        with ErrorContext("Building equipment report"):
            report = dashboard.equipment_report(selected_id)
            if report:
                st.markdown("#### Service history")
                st.dataframe(report.data.history, use_container_width=True, hide_index=True)
                st.download_button(
                    "📄 Download technical report",
                    data=report.data.to_csv_bytes(),
                    file_name=f"report_{report.data.equipment.code}.csv",
                    mime="text/csv",
                )


# =============================================================================
# TAB 3: CUSTOMERS
# =============================================================================
with tab_customers:
    st.dataframe(
        [c.to_dict() for c in sync.store.customers],
        use_container_width=True,
        hide_index=True,
    )

    with st.expander("➕ New customer", expanded=False):
        with st.form("customer_form", clear_on_submit=True):
            c1, c2 = st.columns(2)
            form = {
                "name": c1.text_input("Unit / company name *"),
                "taxId": c2.text_input("Tax identifier *"),
                "email": c1.text_input("Email"),
                "phone": c2.text_input("Phone"),
                "address": st.text_input("Address"),
            }
            if st.form_submit_button("Register customer", type="primary"):
                result = intake.register_customer(form)
                if result:
                    st.success(f"Customer {result.data.name} registered")
                else:
                    logger.warning(f"register_customer rejected [{result.error_code}]: {result.error}")
                    st.error(result.error)


# =============================================================================
# TAB 4: SUPPLIERS (local only)
# =============================================================================
with tab_suppliers:
    st.caption("Suppliers are stored on this device only.")
    equipment_labels = {e.id: f"{e.code} - {e.name}" for e in sync.store.equipment}
    st.dataframe(
        [s.to_dict() for s in sync.store.suppliers],
        use_container_width=True,
        hide_index=True,
    )

    with st.expander("➕ New supplier", expanded=False):
        with st.form("supplier_form", clear_on_submit=True):
            c1, c2 = st.columns(2)
            form = {
                "name": c1.text_input("Supplier name *"),
                "taxId": c2.text_input("Tax identifier"),
                "contactName": c1.text_input("Contact person"),
                "email": c2.text_input("Email"),
                "phone": c1.text_input("Phone"),
                "equipmentId": c2.selectbox(
                    "Related equipment",
                    options=[""] + list(equipment_labels),
                    format_func=lambda eid: "None" if not eid else equipment_labels.get(eid, eid),
                ),
            }
            if st.form_submit_button("Register supplier", type="primary"):
                result = intake.register_supplier(form)
                if result:
                    st.success(f"Supplier {result.data.name} registered")
                else:
                    logger.warning(f"register_supplier rejected [{result.error_code}]: {result.error}")
                    st.error(result.error)
