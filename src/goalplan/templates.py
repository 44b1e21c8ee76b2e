"""Canned task templates used when no AI producer is available.

Each template step's duration is a fraction of the plan's day budget and its
dependencies are indices into the same template.
"""

from __future__ import annotations

from typing import NamedTuple

from goalplan.models import RawTask, TaskCategory, TaskPriority

P = TaskCategory.PLANNING
D = TaskCategory.DESIGN
DEV = TaskCategory.DEVELOPMENT
T = TaskCategory.TESTING
DEP = TaskCategory.DEPLOYMENT

HIGH = TaskPriority.HIGH
MED = TaskPriority.MEDIUM
LOW = TaskPriority.LOW


class Step(NamedTuple):
    title: str
    description: str
    category: TaskCategory
    priority: TaskPriority
    fraction: float
    depends_on: tuple[int, ...]


PRODUCT_LAUNCH = [
    Step("Market research and competitive analysis",
         "Identify the target audience, analyze the leading competitors, build user personas "
         "and pin down the value proposition and positioning.",
         P, HIGH, 0.12, ()),
    Step("Product requirements and feature specification",
         "Write user stories with acceptance criteria, set technical and performance "
         "requirements, prioritize features and draft the roadmap.",
         P, HIGH, 0.10, (0,)),
    Step("Design system and UI/UX mockups",
         "Define colors, typography, spacing and components, then design high-fidelity "
         "screens and an interactive prototype for review.",
         D, HIGH, 0.15, (1,)),
    Step("Development environment setup",
         "Create the repository and branching strategy, CI/CD pipelines, staging and "
         "production environments, databases and coding standards.",
         DEV, HIGH, 0.08, (2,)),
    Step("Core functionality development",
         "Implement the domain model and business logic, database schema, API endpoints, "
         "authentication, authorization, validation and error handling.",
         DEV, HIGH, 0.25, (3,)),
    Step("Frontend implementation",
         "Build responsive UI components, state management, form validation and data "
         "fetching; keep bundles small and the UI accessible.",
         DEV, HIGH, 0.18, (3,)),
    Step("Integration and API connections",
         "Wire the frontend to the backend, add payments, analytics, email and other "
         "third-party services, and test the data flows end to end.",
         DEV, MED, 0.10, (4, 5)),
    Step("Comprehensive testing and QA",
         "Unit, integration and end-to-end tests, cross-browser and mobile checks, load "
         "testing, a security review and fixing critical bugs.",
         T, HIGH, 0.12, (6,)),
    Step("User acceptance testing and feedback",
         "Recruit beta testers, run usability sessions, collect and prioritize feedback "
         "and confirm the acceptance criteria are met.",
         T, MED, 0.08, (7,)),
    Step("Marketing materials and content creation",
         "Landing page copy, screenshots and demo video, onboarding emails, launch posts, "
         "social content and a press kit.",
         D, MED, 0.10, (2,)),
    Step("Documentation and help resources",
         "User guide, tutorials, API reference, FAQ, help center and troubleshooting guides.",
         DEP, LOW, 0.07, (8,)),
    Step("Production deployment and launch",
         "Configure production hosting, CDN, TLS, monitoring, logging and backups, run the "
         "launch checklist and watch system health after release.",
         DEP, HIGH, 0.05, (8, 9)),
]

MARKETING_CAMPAIGN = [
    Step("Campaign strategy and objectives",
         "Set measurable goals and KPIs, split the budget across channels and write the "
         "campaign brief with messaging pillars.",
         P, HIGH, 0.12, ()),
    Step("Market research and audience analysis",
         "Survey and interview customers, review competitor campaigns, build buyer personas "
         "and map the customer journey.",
         P, HIGH, 0.15, (0,)),
    Step("Content strategy and editorial calendar",
         "Choose content themes, plan a 30-day calendar across platforms and assign owners.",
         P, HIGH, 0.10, (1,)),
    Step("Creative assets and design",
         "Social graphics in every size, ad variations for A/B tests, email templates, "
         "landing page mockups and banner ads.",
         D, HIGH, 0.18, (2,)),
    Step("Content creation and copywriting",
         "Blog posts, social copy, email sequences, videos and case studies optimized for "
         "the target keywords.",
         DEV, HIGH, 0.20, (3,)),
    Step("Campaign platform setup and integration",
         "Set up ad accounts, tracking pixels, the email platform with segments, UTM "
         "parameters, analytics goals and automation.",
         DEV, HIGH, 0.10, (3,)),
    Step("Campaign launch and activation",
         "Schedule posts, launch paid campaigns, send the announcement, publish content and "
         "reach out to influencers and press.",
         DEP, HIGH, 0.08, (4, 5)),
    Step("Performance monitoring and optimization",
         "Track KPIs daily, A/B test creatives, tune bids and targeting and move budget to "
         "the best channels.",
         T, HIGH, 0.15, (6,)),
    Step("Campaign analysis and reporting",
         "Compile results and ROI, compare against the goals and record lessons learned.",
         T, MED, 0.07, (7,)),
]

EVENT = [
    Step("Event concept and strategic planning",
         "Define the purpose, attendance goals, theme and budget, and the target audience.",
         P, HIGH, 0.10, ()),
    Step("Venue selection and contract negotiation",
         "List venue requirements, visit candidates, compare offers, negotiate the contract "
         "and plan the floor layout.",
         P, HIGH, 0.12, (0,)),
    Step("Speaker recruitment and content planning",
         "Invite speakers, build the agenda, handle speaker logistics and plan networking "
         "sessions and backups.",
         P, HIGH, 0.15, (1,)),
    Step("Event branding and website development",
         "Visual identity, event website, promotional and printed materials and speaker "
         "templates.",
         D, HIGH, 0.12, (2,)),
    Step("Marketing and promotional campaign",
         "Email, social and paid promotion, early-bird pricing, influencer and media "
         "outreach and partner cross-promotion.",
         DEV, HIGH, 0.18, (3,)),
    Step("Registration and ticketing infrastructure",
         "Ticketing platform, ticket tiers, confirmation and reminder emails, check-in and "
         "discount codes.",
         DEV, HIGH, 0.08, (3,)),
    Step("Logistics coordination and vendor management",
         "Catering, AV, transport, accommodation, swag, staff and the run-of-show document.",
         DEV, MED, 0.12, (1, 5)),
    Step("Event execution and on-site management",
         "Set up the venue, brief staff, run registration and sessions, cover the event and "
         "handle issues as they come.",
         DEP, HIGH, 0.08, (6,)),
    Step("Post-event follow-up and impact analysis",
         "Thank attendees and speakers, run the survey, share recordings and report on "
         "attendance, satisfaction and ROI.",
         T, MED, 0.05, (7,)),
]

GENERIC = [
    Step("Project scope and requirements gathering",
         "Interview stakeholders, document requirements, define scope, deliverables and "
         "success criteria and get sign-off.",
         P, HIGH, 0.15, ()),
    Step("Research and feasibility analysis",
         "Study best practices, assess technical feasibility, tools and resources and build "
         "a proof of concept for risky parts.",
         P, HIGH, 0.12, (0,)),
    Step("Detailed planning and system design",
         "Work breakdown structure, milestones, architecture and data models, technical "
         "specifications and responsibilities.",
         D, HIGH, 0.15, (1,)),
    Step("Environment setup and tool configuration",
         "Development tooling, version control, collaboration tools, CI/CD and test "
         "frameworks.",
         DEV, HIGH, 0.08, (2,)),
    Step("Core implementation phase 1",
         "Build the foundation and critical features in short iterations with reviews and "
         "unit tests.",
         DEV, HIGH, 0.18, (3,)),
    Step("Core implementation phase 2",
         "Finish remaining features and integrations, refactor, optimize and improve error "
         "handling and logging.",
         DEV, HIGH, 0.15, (4,)),
    Step("Comprehensive testing and quality assurance",
         "Unit, integration, end-to-end, load, security and accessibility testing, then fix "
         "critical bugs.",
         T, HIGH, 0.12, (5,)),
    Step("User acceptance testing and feedback",
         "Run UAT sessions with representative users, prioritize the feedback and verify "
         "the fixes.",
         T, MED, 0.08, (6,)),
    Step("Documentation and knowledge transfer",
         "User and technical documentation, training material, runbooks and handover "
         "sessions.",
         DEP, MED, 0.07, (7,)),
    Step("Production deployment and launch",
         "Harden production, prepare rollback, deploy, smoke test and monitor closely after "
         "launch.",
         DEP, HIGH, 0.05, (8,)),
]

# First matching keyword family wins; anything else gets GENERIC.
TEMPLATES: list[tuple[str, tuple[str, ...], list[Step]]] = [
    ("product", ("product", "launch", "app", "website"), PRODUCT_LAUNCH),
    ("marketing", ("marketing", "campaign", "promotion"), MARKETING_CAMPAIGN),
    ("event", ("event", "conference", "workshop"), EVENT),
]


def match_template(goal_text: str) -> tuple[str, list[Step]]:
    text = goal_text.lower()
    for name, keywords, steps in TEMPLATES:
        if any(k in text for k in keywords):
            return name, steps
    return "generic", GENERIC


def fallback_tasks(goal_text: str, total_days: float) -> list[RawTask]:
    """Deterministic task list for *goal_text*, scaled to *total_days*."""
    _, steps = match_template(goal_text)
    return [
        RawTask(
            title=s.title,
            description=s.description,
            category=s.category,
            priority=s.priority,
            estimated_duration_days=total_days * s.fraction,
            depends_on=list(s.depends_on),
        )
        for s in steps
    ]
