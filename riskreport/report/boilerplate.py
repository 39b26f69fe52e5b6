from __future__ import annotations

import re
from dataclasses import dataclass

from riskreport.types import Jurisdiction

_BOLD_HEADING_RE = re.compile(r'^\*\*(.+?)\*\*\s*(.*)$', re.DOTALL)


@dataclass(frozen=True)
class ReferenceItem:
    label: str
    detail: str | None = None


@dataclass(frozen=True)
class TextBlock:
    heading: str | None
    body: str


def parse_marked_paragraphs(text: str) -> list[TextBlock]:
    """Split on blank lines; a paragraph that opens with ``**heading**`` becomes a bold heading."""
    blocks: list[TextBlock] = []
    for paragraph in re.split(r'\n\s*\n', text):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        match = _BOLD_HEADING_RE.match(paragraph)
        if match:
            blocks.append(TextBlock(heading=match.group(1).strip(), body=match.group(2).strip()))
        else:
            blocks.append(TextBlock(heading=None, body=paragraph))
    return blocks


EXPLOSIVE_ATMOSPHERES_PURPOSE = """This assessment evaluates the risks arising from explosive atmospheres and dangerous substances associated with processes and activities undertaken at the premises. It identifies hazardous areas, potential ignition sources, and the control measures in place to prevent and mitigate explosion risk.

The assessment methodology follows industry best practice for identifying sources of flammable substance release, evaluating the likelihood and duration of explosive atmosphere formation, and determining appropriate risk control measures. This includes systematic evaluation of process operations, material handling, storage arrangements, and the selection of equipment suitable for use in classified hazardous areas.

The assessment considers both gases and vapours (Group II atmospheres) and combustible dusts, addressing the specific characteristics and control requirements for each. The evaluation encompasses normal operating conditions, maintenance activities, and foreseeable abnormal situations that could lead to the formation of explosive atmospheres."""

HAZARDOUS_AREA_CLASSIFICATION = """Hazardous area classification identifies the places where an explosive atmosphere may occur and grades them by the frequency and duration with which that atmosphere is expected to be present. Each source of release is examined in turn, taking account of the properties of the substance, the rate and grade of release, and the ventilation available to dilute and disperse it.

Sources of release are graded as continuous, primary or secondary. The grade of release, combined with the type and availability of ventilation, determines the zone assigned to the surrounding area. Zone extents are estimated from the release characteristics and recognised calculation methods, and are recorded on hazardous area classification drawings.

For combustible dusts the same principles apply, with particular attention paid to dust layers and deposits that could be raised into a cloud. Good housekeeping is treated as part of the basis of classification, and the extent of dust zones assumes that the housekeeping standard recorded in this assessment is maintained.

The resulting classification is used to select equipment of an appropriate category for each zone, to control ignition sources within classified areas, and to define the areas in which permit-to-work and hot work controls apply."""

ZONE_DEFINITIONS = """**Zone 0 / Zone 20**

An area in which an explosive gas atmosphere (Zone 0) or explosive dust atmosphere (Zone 20) is present continuously, or for long periods, or frequently. Equipment and protective systems for use in these areas must provide the highest level of safety and reliability. Only Category 1 equipment certified for Zone 0 or Zone 20 use may be installed. These areas typically include the interior of closed vessels, storage tanks, or processing equipment where flammable substances are continuously present.

**Zone 1 / Zone 21**

An area in which an explosive gas atmosphere (Zone 1) or explosive dust atmosphere (Zone 21) is likely to occur in normal operation occasionally. This classification applies to areas immediately surrounding Zone 0/20 areas, or where releases are expected during normal operational procedures such as sampling, maintenance, or routine equipment opening. Equipment for use in these zones must be Category 1 or Category 2, certified for Zone 1 or Zone 21. Examples include areas adjacent to flanges, valves, or process equipment where releases may occur during normal plant operation.

**Zone 2 / Zone 22**

An area in which an explosive gas atmosphere (Zone 2) or explosive dust atmosphere (Zone 22) is not likely to occur in normal operation but, if it does occur, will persist for a short period only. These zones are typically found surrounding Zone 1/21 areas as an additional safety margin, or in areas where releases are only credible under abnormal conditions such as equipment failure or process upset. Equipment suitable for Zone 2 or Zone 22 must be Category 1, 2, or 3. These areas require appropriate work permit systems and hot work controls but permit the use of normal industrial equipment in many cases.

**Non-Hazardous Areas**

Areas where explosive atmospheres are not expected to occur to an extent requiring special precautions. Standard industrial electrical and mechanical equipment may be used in these areas without additional ATEX certification. However, good practice requires that ignition sources are still controlled through appropriate systems of work, particularly when undertaking hot work or when flammable substances are temporarily introduced to the area."""

FRA_REGULATORY_FRAMEWORK = """The Regulatory Reform (Fire Safety) Order 2005 (FSO) applies to virtually all premises and workplaces in England and Wales, other than domestic premises. In Scotland, the Fire (Scotland) Act 2005 and the Fire Safety (Scotland) Regulations 2006 impose similar requirements. These regulations place a legal duty on the 'responsible person' to carry out a suitable and sufficient fire risk assessment and to implement appropriate fire safety measures.

The responsible person must identify fire hazards and people at risk, evaluate the risks arising from those hazards, and determine whether existing fire safety measures are adequate or if additional precautions are required. The assessment must be kept under regular review and be revised where significant changes occur to the premises, work activities, or if the assessment is no longer valid.

The FSO adopts a risk-based, goal-setting approach to fire safety rather than prescriptive requirements. This means that the responsible person has flexibility in determining how to achieve adequate fire safety standards, provided that the level of risk to relevant persons is reduced to an acceptable level. Guidance documents such as those published by the government and professional bodies provide valuable assistance in interpreting the requirements and achieving compliance.

Key objectives under the FSO include ensuring that people can safely evacuate the premises in the event of fire, that fire safety systems and equipment are properly maintained and tested, that staff receive appropriate fire safety training, and that suitable management arrangements are in place to maintain and improve fire safety standards over time."""

DSEAR_RISK_PROFILE_STATEMENT = (
    'The explosion risk profile is driven by the presence of classified hazardous areas and the adequacy of '
    'controls identified. Refer to action register for specific recommendations to reduce risk.'
)


def fra_responsible_person_duties(jurisdiction: Jurisdiction = Jurisdiction.uk) -> str:
    uk = jurisdiction == Jurisdiction.uk
    legislation = 'the Regulatory Reform (Fire Safety) Order 2005' if uk else 'applicable fire safety legislation'
    standards = 'British Standards' if uk else 'applicable standards and guidance'
    required_by = 'the Order' if uk else 'applicable legislation'

    return f"""Under {legislation}, the responsible person has a legal obligation to take reasonable steps to reduce the risk from fire and to ensure that people can safely escape if a fire occurs. The specific duties of the responsible person include:

**Fire Risk Assessment:** Carry out and regularly review a comprehensive fire risk assessment that identifies fire hazards, evaluates risks to people, and determines appropriate control measures. The assessment must be recorded where five or more persons are employed or the premises are licensed.

**Fire Safety Measures:** Implement and maintain appropriate fire safety measures based on the findings of the fire risk assessment. This includes providing suitable means of escape, fire detection and warning systems, firefighting equipment, emergency lighting, and fire safety signs where necessary.

**Emergency Planning:** Establish and maintain an emergency plan that sets out the actions to be taken in the event of fire, including evacuation procedures, assembly points, and arrangements for assisting vulnerable persons. The plan must be tested through regular fire drills.

**Information and Training:** Provide relevant persons with appropriate information about fire risks, fire safety measures, and emergency procedures. Ensure that employees receive adequate fire safety training and instruction appropriate to their role and responsibilities.

**Maintenance and Testing:** Ensure that all fire safety equipment and systems are properly maintained in efficient working order and good repair. This includes regular inspection, testing, and servicing by competent persons in accordance with manufacturers' recommendations and {standards}.

**Management Arrangements:** Establish effective fire safety management arrangements, including clear allocation of responsibilities, monitoring of compliance, and arrangements for liaison with the fire and rescue service where appropriate. Management systems should be proportionate to the risks and the size and nature of the organisation.

**Cooperation and Coordination:** Where premises are shared with other employers or occupiers, the responsible person must cooperate and coordinate with others to ensure that fire safety measures are effectively implemented across the premises.

The responsible person may appoint one or more competent persons to assist in undertaking the preventive and protective measures required by {required_by}. However, the responsible person retains overall accountability for fire safety compliance."""


def fsd_purpose_and_scope(jurisdiction: Jurisdiction = Jurisdiction.uk) -> str:
    if jurisdiction == Jurisdiction.uk:
        compliance = 'the Building Regulations Approved Document B (Fire Safety) and associated guidance'
    else:
        compliance = 'applicable building regulations and fire safety standards'

    return f"""This Fire Strategy document has been prepared to demonstrate compliance with {compliance}, or equivalent approved standards and regulations applicable to the building type and jurisdiction. The document provides a comprehensive overview of the fire safety design principles, life safety provisions, and protective measures incorporated into the building design to ensure the safety of occupants and facilitate effective firefighting operations.

The fire strategy establishes the fundamental approach to fire safety design including the basis of design, relevant standards and guidance applied, and any departures from standard provisions where alternative solutions have been developed. It describes the means of escape strategy, travel distances, stair provisions, and evacuation assumptions appropriate to the building occupancy and user characteristics.

Key aspects covered include compartmentation and fire resistance requirements, fire stopping and cavity barriers, provisions for external fire spread, requirements for fire doors and other fire-resisting elements, and integration of passive fire protection with structural design. The strategy also addresses active fire protection systems including fire detection and alarm, emergency lighting, fire suppression systems where provided, smoke control systems, and firefighting facilities including fire service access, firefighting shafts, and dry or wet rising mains as applicable.

The document is intended for use by the design team, Building Control authority, fire and rescue service during consultation, the contractor during construction, and building management for ongoing maintenance and compliance. It forms a critical part of the Building Control submission and provides the basis for detailed design development, specification, and construction phase fire safety management. The fire strategy should be maintained as a live document throughout the design and construction process, with updates issued when significant design changes occur that affect fire safety provisions."""


def fsd_limitations(jurisdiction: Jurisdiction = Jurisdiction.uk) -> str:
    uk = jurisdiction == Jurisdiction.uk
    standards = 'relevant British Standards' if uk else 'relevant standards and guidance'
    legislation = (
        'the Regulatory Reform (Fire Safety) Order 2005 or equivalent legislation'
        if uk
        else 'applicable fire safety legislation'
    )

    return f"""This fire strategy is based upon the design information available at the time of preparation. As the design develops, further detail will emerge that may necessitate updates to the fire strategy. Any significant changes to the building layout, structural design, proposed occupancy, or fire safety systems should be reviewed to ensure continued compliance with the fire strategy principles and applicable regulations.

The fire strategy assumes that all building work will be carried out in accordance with good building practice, {standards}, and manufacturers' installation instructions. Fire-resisting construction, fire stopping, and cavity barriers must be installed by competent contractors with appropriate third-party certification or inspection to verify compliance with the specified fire resistance performance. Any variations from the specified fire safety provisions must be agreed with the Building Control authority and fire and rescue service where applicable.

The effectiveness of the fire safety measures described in this strategy is dependent upon appropriate ongoing management, maintenance, and testing of fire safety systems in accordance with relevant standards and manufacturers' recommendations. The building owner and management must establish suitable arrangements for routine inspection and testing of fire alarms, emergency lighting, firefighting equipment, and smoke control systems as specified in this document.

This fire strategy does not address detailed specifications for building services installations, except where they impact upon fire safety provisions. Coordination between fire safety design and mechanical, electrical, and public health services design is essential to ensure that service penetrations through fire-resisting elements are adequately fire stopped, that ductwork and pipework installations do not compromise compartmentation, and that building services do not introduce uncontrolled ignition sources or combustible materials that could undermine the fire strategy.

The strategy is intended to inform Building Control approval and does not constitute a detailed fire risk assessment under {legislation}. Upon completion and occupation of the building, the responsible person must undertake a suitable and sufficient fire risk assessment considering the actual use, management arrangements, and occupant characteristics, and implement appropriate fire safety management measures to maintain safety and regulatory compliance."""


_UK_REFERENCES = (
    ReferenceItem(
        'Dangerous Substances and Explosive Atmospheres Regulations 2002 (DSEAR)',
        'Primary UK legislation governing the control of risks from fire, explosion and similar events arising '
        'from dangerous substances used or present in the workplace.',
    ),
    ReferenceItem(
        'Health and Safety at Work etc. Act 1974',
        'Primary duty of care for employers to ensure, so far as is reasonably practicable, the health, safety and '
        'welfare of employees and others who may be affected by work activities.',
    ),
    ReferenceItem(
        'Equipment and Protective Systems Intended for Use in Potentially Explosive Atmospheres Regulations 2016',
        'UK implementation of ATEX equipment requirements (Directive 2014/34/EU).',
    ),
    ReferenceItem('BS EN 60079-10-1:2015', 'Classification of areas - Explosive gas atmospheres.'),
    ReferenceItem('BS EN 60079-10-2:2015', 'Classification of areas - Explosive dust atmospheres.'),
)

_IE_REFERENCES = (
    ReferenceItem(
        'Safety, Health and Welfare at Work Act 2005',
        'Primary Irish legislation establishing duties for employers to ensure the safety, health and welfare of '
        'employees.',
    ),
    ReferenceItem(
        'Chemicals Act (Control of Major Accident Hazards involving Dangerous Substances) Regulations 2015 (COMAH)',
        'Irish regulations controlling major accident hazards involving dangerous substances.',
    ),
    ReferenceItem(
        'European Communities (Equipment and Protective Systems Intended for Use in Potentially Explosive '
        'Atmospheres) Regulations 2016',
        'Irish implementation of ATEX equipment requirements (Directive 2014/34/EU).',
    ),
    ReferenceItem('IS EN 60079-10-1:2015', 'Classification of areas - Explosive gas atmospheres.'),
    ReferenceItem('IS EN 60079-10-2:2015', 'Classification of areas - Explosive dust atmospheres.'),
)


def explosive_atmospheres_references(jurisdiction: Jurisdiction) -> tuple[ReferenceItem, ...]:
    return _IE_REFERENCES if jurisdiction == Jurisdiction.ie else _UK_REFERENCES
